"""Content brief models produced by the content-analysis stage.

The brief is decoded from model output as an untyped JSON document and then
validated here. Only the business name and at least one content section are
required; everything else defaults so that partial briefs are forwarded
rather than rejected. Model output is loose about types, so ``null`` falls
back to the field default and numbers are accepted where text is expected.
Field names are camelCase on the wire.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _text_items(value: Any) -> Any:
    """A lone string becomes a one-item list; null items are dropped."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if item is not None]
    return value


TextList = Annotated[list[str], BeforeValidator(_text_items)]


class BriefModel(BaseModel):
    """Base model for brief entities (camelCase wire format, extras kept)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null means "not provided"; required fields still fail when null
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class BusinessInfo(BriefModel):
    name: str = Field(..., min_length=1, description="Business name")
    industry: str = ""
    type: str = ""
    url: str = ""


class BrandTone(BriefModel):
    personality: str = ""
    target_audience: str = ""
    brand_keywords: TextList = Field(default_factory=list)


class ContentSection(BriefModel):
    id: str = ""
    type: str = "other"
    title: str = ""
    summary: str = ""
    key_points: TextList = Field(default_factory=list)


class ImageCatalogEntry(BriefModel):
    """An extracted image with its placement hint.

    ``priority`` 1 is the hero candidate; ``index`` refers back to the
    numbered image list sent to the model.
    """

    url: str
    description: str = ""
    recommended_placement: str = "other"
    priority: int = 99
    index: int | None = None


class VideoCatalogEntry(BriefModel):
    url: str
    description: str = ""
    recommended_placement: str = "section"


class SocialLink(BriefModel):
    platform: str = ""
    url: str = ""


class ContactInfo(BriefModel):
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    hours: str | None = None
    social_links: list[SocialLink] = Field(default_factory=list)


class NicheDetection(BriefModel):
    detected_niche: str | None = None
    confidence: str = "low"
    reasoning: str = ""
    niche_signals: TextList = Field(default_factory=list)


class TemplateRecommendation(BriefModel):
    template: str = "minimal"
    reasoning: str = ""


class StatEntry(BriefModel):
    label: str = ""
    value: str = ""


class PersonEntry(BriefModel):
    name: str = ""
    role: str = ""
    image: str | None = None
    bio: str | None = None


class TestimonialEntry(BriefModel):
    quote: str = ""
    author: str = ""
    role: str | None = None


class ServiceOrProduct(BriefModel):
    name: str = ""
    description: str = ""
    price: str | None = None
    icon: str | None = None


class PricingTier(BriefModel):
    name: str = ""
    price: str = ""
    period: str | None = None
    features: TextList = Field(default_factory=list)
    highlighted: bool = False


class FAQItem(BriefModel):
    question: str = ""
    answer: str = ""


class ContentBrief(BriefModel):
    """Structured description of a business's content, prior to layout."""

    business: BusinessInfo
    content_sections: list[ContentSection] = Field(..., min_length=1)
    tone: BrandTone = Field(default_factory=BrandTone)
    image_catalog: list[ImageCatalogEntry] = Field(default_factory=list)
    video_catalog: list[VideoCatalogEntry] = Field(default_factory=list)
    contact: ContactInfo = Field(default_factory=ContactInfo)
    niche_detection: NicheDetection = Field(default_factory=NicheDetection)
    template_recommendation: TemplateRecommendation = Field(
        default_factory=TemplateRecommendation
    )
    statistics: list[StatEntry] = Field(default_factory=list)
    people: list[PersonEntry] = Field(default_factory=list)
    testimonials: list[TestimonialEntry] = Field(default_factory=list)
    services_or_products: list[ServiceOrProduct] = Field(default_factory=list)
    pricing_tiers: list[PricingTier] = Field(default_factory=list)
    faq_items: list[FAQItem] = Field(default_factory=list)
    booking_url: str | None = None
    gift_cards_url: str | None = None
    pro_shop_url: str | None = None

    def to_prompt_json(self) -> str:
        """Serialize the brief in its wire format for the next stage's prompt."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
