"""Blueprint models: the final structured site-layout description.

A blueprint is a tagged union. The niche path carries a predefined template
identifier plus niche-specific data and never a block list; the block path
carries a non-empty ordered list of typed layout blocks. Both carry a color
scheme.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class BlueprintModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ColorScheme(BlueprintModel):
    primary: str = Field(..., min_length=1)
    background: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    secondary: str = ""
    accent: str = ""


class LayoutBlock(BlueprintModel):
    """One typed layout section (hero, serviceGrid, faq, ...).

    Block-specific properties are kept as extra fields and passed through
    to the renderer untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    type: str = Field(..., min_length=1)


class BlueprintBase(BlueprintModel):
    site_name: str = ""
    color_scheme: ColorScheme
    font: str | None = None
    template: str | None = None
    # Unscraped pages available for on-demand generation downstream
    discovered_urls: list[str] = Field(default_factory=list)


class NicheBlueprint(BlueprintBase):
    kind: Literal["niche"] = "niche"
    niche_template: str = Field(..., min_length=1)
    niche_data: dict[str, Any]

    @property
    def layout(self) -> list[LayoutBlock]:
        return []


class BlockBlueprint(BlueprintBase):
    kind: Literal["blocks"] = "blocks"
    layout: list[LayoutBlock] = Field(..., min_length=1)


Blueprint = Annotated[
    Union[NicheBlueprint, BlockBlueprint], Field(discriminator="kind")
]

blueprint_adapter: TypeAdapter[Blueprint] = TypeAdapter(Blueprint)
