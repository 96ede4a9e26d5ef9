"""Reference catalog entity model."""

from __future__ import annotations

from pydantic import Field, field_validator

from pykokudo.models._base import KokudoBaseModel


class RouteEntity(KokudoBaseModel):
    """A national route from the bundled reference catalog.

    Parameters
    ----------
    id : int
        Route number. Unique and stable.
    region : str
        Regions the route passes through, e.g. ``"関東・中部・近畿"``.
    category : str
        Route class (JSON key ``type``).
    endpoint_from : str
        Starting point (JSON key ``from``).
    endpoint_to : str
        End point (JSON key ``to``).
    """

    id: int
    region: str = ""
    category: str = Field(default="", alias="type")
    endpoint_from: str = Field(default="", alias="from")
    endpoint_to: str = Field(default="", alias="to")

    @field_validator("id")
    @classmethod
    def _positive_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("route id must be positive")
        return value

    @property
    def key(self) -> str:
        """Store key for this route."""
        return str(self.id)

    @property
    def label(self) -> str:
        return f"国道{self.id}号"
