"""Zebedee content-store page models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ZebedeeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Contact(ZebedeeModel):
    email: str = ""
    name: str = ""
    telephone: str = ""


class Description(ZebedeeModel):
    title: str = ""
    edition: str = ""
    summary: str = ""
    keywords: list[str] = Field(default_factory=list)
    meta_description: str = ""
    national_statistic: bool = False
    contact: Contact = Field(default_factory=Contact)
    release_date: str = ""
    next_release: str = ""
    dataset_id: str = ""
    unit: str = ""
    pre_unit: str = ""
    source: str = ""
    cdid: str = ""
    date: str = ""
    number: str = ""


class Related(ZebedeeModel):
    title: str = ""
    uri: str = ""


class Link(ZebedeeModel):
    title: str = ""
    uri: str = ""


class Alert(ZebedeeModel):
    date: str = ""
    markdown: str = ""
    type: str = ""


class DatasetLandingPage(ZebedeeModel):
    type: str = ""
    uri: str = ""
    description: Description = Field(default_factory=Description)
    section: dict = Field(default_factory=dict)
    datasets: list[Link] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)
    related_datasets: list[Related] = Field(default_factory=list)
    related_documents: list[Related] = Field(default_factory=list)
    related_methodology: list[Related] = Field(default_factory=list)
    related_methodology_article: list[Related] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)

    def related_entries(self) -> list[Related]:
        """Every related-page entry whose title is resolved from its own page."""
        return [
            *self.related_datasets,
            *self.related_documents,
            *self.related_methodology,
            *self.related_methodology_article,
        ]


class Download(ZebedeeModel):
    file: str = ""
    size: str = ""


class SupplementaryFile(ZebedeeModel):
    title: str = ""
    file: str = ""
    size: str = ""


class Version(ZebedeeModel):
    uri: str = ""
    release_date: str = ""
    notice: str = ""
    label: str = ""


class Dataset(ZebedeeModel):
    type: str = ""
    uri: str = ""
    description: Description = Field(default_factory=Description)
    downloads: list[Download] = Field(default_factory=list)
    supplementary_files: list[SupplementaryFile] = Field(default_factory=list)
    versions: list[Version] = Field(default_factory=list)


class FileSize(ZebedeeModel):
    size: int = 0


class PageTitle(ZebedeeModel):
    title: str = ""
    edition: str = ""
    uri: str = ""


class NodeDescription(ZebedeeModel):
    title: str = ""


class Breadcrumb(ZebedeeModel):
    uri: str = ""
    description: NodeDescription = Field(default_factory=NodeDescription)
    type: str = ""


class TimeseriesDataPoint(ZebedeeModel):
    date: str = ""
    value: str = ""
    year: str = ""
    month: str = ""
    quarter: str = ""
    source_dataset: str = ""
    update_date: str = ""


class TimeseriesMainFigure(ZebedeeModel):
    type: str = ""
    uri: str = ""
    description: Description = Field(default_factory=Description)
    years: list[TimeseriesDataPoint] = Field(default_factory=list)
    quarters: list[TimeseriesDataPoint] = Field(default_factory=list)
    months: list[TimeseriesDataPoint] = Field(default_factory=list)
    related_documents: list[Related] = Field(default_factory=list)
