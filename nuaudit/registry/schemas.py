"""Response schemas for the NuGet v3 service index and registration resources."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nuaudit.models import PackageMetadata, Vulnerability

SEVERITY_LABELS = {0: "Low", 1: "Moderate", 2: "High", 3: "Critical"}


def severity_label(value: int | str) -> str:
    """Map the registry's numeric severity to its label (unknown values pass through)."""
    try:
        return SEVERITY_LABELS.get(int(value), str(value))
    except (TypeError, ValueError):
        return str(value)


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ServiceResource(_Schema):
    id: str = Field(alias="@id")
    type: str = Field(alias="@type")


class ServiceIndex(_Schema):
    version: str | None = None
    resources: list[ServiceResource]

    def find(self, *types: str) -> str | None:
        """Return the URL of the first resource matching *types* in preference order."""
        for wanted in types:
            for resource in self.resources:
                if resource.type == wanted:
                    return resource.id
        return None


class VulnerabilityEntry(_Schema):
    advisory_url: str = Field(alias="advisoryUrl")
    severity: str

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_to_str(cls, value: object) -> str:
        return str(value)


class CatalogEntry(_Schema):
    id: str
    version: str
    authors: str = ""
    license_expression: str | None = Field(default=None, alias="licenseExpression")
    license_url: str | None = Field(default=None, alias="licenseUrl")
    vulnerabilities: list[VulnerabilityEntry] = Field(default_factory=list)

    @field_validator("authors", mode="before")
    @classmethod
    def _join_authors(cls, value: object) -> str:
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return str(value)

    @field_validator("vulnerabilities", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return [] if value is None else value

    def to_metadata(self) -> PackageMetadata:
        return PackageMetadata(
            name=self.id,
            version=self.version,
            license=self.license_expression or None,
            authors=self.authors,
            vulnerabilities=tuple(
                Vulnerability(severity=severity_label(v.severity), advisory_url=v.advisory_url)
                for v in self.vulnerabilities
            ),
            license_url=self.license_url or None,
        )


class RegistrationLeaf(_Schema):
    catalog_entry: CatalogEntry = Field(alias="catalogEntry")


class RegistrationPage(_Schema):
    id: str = Field(alias="@id")
    items: list[RegistrationLeaf] | None = None


class RegistrationIndex(_Schema):
    items: list[RegistrationPage] = Field(default_factory=list)
