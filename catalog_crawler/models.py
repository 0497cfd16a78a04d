from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Type, TypeVar, Union

from .utils.parsing import normalize_url

F = TypeVar("F")


class PageType(str, Enum):
    """State labels of the crawl. Exactly one per work item."""

    HOME = "home"
    CATEGORY = "categoryPage"
    SUBCATEGORY = "subCategoryPage"
    PRODUCT = "product"

    @classmethod
    def parse(cls, value: Union[str, "PageType"]) -> "PageType":
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name, member.name.lower()):
                return member
        raise ValueError(f"Unknown page type: {value!r}")


@dataclass(frozen=True)
class LinkRef:
    href: str
    title: str

    def to_dict(self) -> Dict[str, str]:
        return {"href": self.href, "title": self.title}


@dataclass(frozen=True)
class CategoryTrait:
    # top category, e.g. "женщинам"
    category: str
    # subcategory, e.g. "блузки и рубашки"
    subcategory: str
    # goods type, e.g. "блузка-боди"
    goods_category: str

    def missing_fields(self) -> List[str]:
        names = (("category", self.category), ("subcategory", self.subcategory), ("goodsCategory", self.goods_category))
        return [name for name, value in names if not value]

    def to_dict(self) -> Dict[str, str]:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "goodsCategory": self.goods_category,
        }


@dataclass(frozen=True)
class ParentLinks:
    """Menu links a category page was enqueued from, keyed by absolute URL."""

    links: Mapping[str, LinkRef]

    def __post_init__(self) -> None:
        object.__setattr__(self, "links", MappingProxyType(dict(self.links)))

    def lookup(self, url: str) -> Optional[LinkRef]:
        return self.links.get(normalize_url(url))


ContextFrame = Union[ParentLinks, CategoryTrait]


@dataclass(frozen=True)
class ContextChain:
    """Ordered ancestor metadata; empty at the home page."""

    frames: Tuple[ContextFrame, ...] = ()

    def extend(self, frame: ContextFrame) -> "ContextChain":
        return ContextChain(self.frames + (frame,))

    def latest(self, kind: Type[F]) -> Optional[F]:
        for frame in reversed(self.frames):
            if isinstance(frame, kind):
                return frame
        return None

    def __len__(self) -> int:
        return len(self.frames)


@dataclass(frozen=True)
class WorkItem:
    """
    One unit of crawl work. Identity is the normalized URL.
    Never mutated; children are derived with ``child``.
    """

    url: str
    label: PageType
    context: ContextChain = field(default_factory=ContextChain)

    @property
    def key(self) -> str:
        return normalize_url(self.url)

    def child(self, url: str, label: PageType, frame: ContextFrame) -> "WorkItem":
        return WorkItem(url=normalize_url(url), label=label, context=self.context.extend(frame))


class SizeUnit(str, Enum):
    CM = "cm"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SizeValue:
    """Numeric only when the source text carried the centimeter marker; raw text otherwise."""

    value: Union[int, float, str]
    unit: SizeUnit

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit.value}


@dataclass(frozen=True)
class Sizes:
    length: Optional[SizeValue] = None
    width: Optional[SizeValue] = None
    height: Optional[SizeValue] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for name in ("length", "width", "height"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value.to_dict()
        return out


class CompanyType(str, Enum):
    INDIVIDUAL = "individual"
    LLC = "llc"
    CLOSED_JSC = "closed-jsc"
    JSC = "jsc"
    OTHER = "other"
    UNKNOWN = "unknown"


class CompanySource(str, Enum):
    # breadcrumbs are the reliable source; the sidebar may show a marketing name
    BREADCRUMBS = "fromBreadcrumbs"
    SIDEBAR = "fromSidebar"


@dataclass(frozen=True)
class Company:
    name: str
    url: str
    # Not classified yet; always None.
    type: Optional[CompanyType] = None
    source: CompanySource = CompanySource.BREADCRUMBS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value if self.type else None,
            "source": self.source.value,
            "url": self.url,
        }


class Record(Protocol):
    def to_dict(self) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class MenuRecord:
    """Top navigation of the home page after the exclusion filter."""

    url: str
    links: Tuple[LinkRef, ...]
    excluded: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "menu": [link.to_dict() for link in self.links],
            "excluded": list(self.excluded),
        }


@dataclass(frozen=True)
class CategoryLinkBatch:
    parent: LinkRef
    children: Tuple[LinkRef, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent": self.parent.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class SubcategoryRecord:
    url: str
    title: Optional[str]
    trait: CategoryTrait
    total: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"total": self.total}
        data.update(self.trait.to_dict())
        return {"title": self.title, "url": self.url, "data": data}


@dataclass(frozen=True)
class ProductRecord:
    url: str
    title: str
    price: float
    rating: Optional[float]
    rating_count: Optional[int]
    company: Optional[Company]
    sizes: Optional[Sizes]
    category: CategoryTrait

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "data": {
                "title": self.title,
                "price": self.price,
                "rating": self.rating,
                "ratingCount": self.rating_count,
                "company": self.company.to_dict() if self.company else None,
                "sizes": self.sizes.to_dict() if self.sizes is not None else None,
            },
            "category": self.category.to_dict(),
        }
