"""Shared fixtures: a registry over the bundled catalog, a sample document and a fake generator."""

import copy

import pytest

from scribe.contexts.document.document_data_structure import ResumeDocument
from scribe.contexts.schema.registry import SchemaRegistry
from scribe.utils.config import AIConfig

SAMPLE_DOCUMENT = {
    "personalDetails": {
        "fullName": "Ada Lovelace",
        "jobTitle": "Data Engineer",
        "email": "ada@example.com",
        "avatar": "data:image/png;base64,AAAA",
    },
    "schemaVersion": "1.0.0",
    "templateId": "default",
    "sections": [
        {
            "id": "summary_1",
            "schemaId": "summary",
            "title": "Summary",
            "items": [{"id": "summary_item", "data": {"content": "Engineer who builds data pipelines."}}],
        },
        {
            "id": "experience_1",
            "schemaId": "experience",
            "title": "Experience",
            "items": [
                {
                    "id": "exp_a",
                    "data": {
                        "jobTitle": "Data Engineer",
                        "company": "Acme",
                        "location": "London",
                        "startDate": "2020-01",
                        "endDate": "2023-06",
                        "description": "Built ETL jobs",
                    },
                },
                {
                    "id": "exp_b",
                    "data": {
                        "jobTitle": "Analyst",
                        "company": "Globex",
                        "startDate": "2018-03",
                        "endDate": "2019-12",
                        "description": "Wrote SQL reports",
                    },
                },
            ],
        },
        {
            "id": "education_1",
            "schemaId": "education",
            "title": "Education",
            "items": [
                {
                    "id": "edu_a",
                    "data": {
                        "degree": "BSc Mathematics",
                        "institution": "University of London",
                        "graduationYear": "2017",
                        "details": "",
                    },
                }
            ],
        },
        {
            "id": "skills_1",
            "schemaId": "skills",
            "title": "Skills",
            "items": [
                {"id": "skill_a", "data": {"name": "Python"}},
                {"id": "skill_b", "data": {"name": "SQL"}},
            ],
        },
        {
            "id": "hobbies_1",
            "schemaId": "customText",
            "title": "Hobbies",
            "visible": False,
            "items": [{"id": "custom_a", "data": {"content": "Chess"}}],
        },
    ],
}


class FakeGenerator:
    """Async generator stand-in returning canned results and recording calls."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def __call__(self, task, payload, shape):
        self.calls.append((task, payload, shape))
        if self.error is not None:
            raise self.error
        if callable(self.result):
            return self.result(task, payload, shape)
        return copy.deepcopy(self.result)


@pytest.fixture
def sample_document_dict():
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def sample_document(sample_document_dict):
    return ResumeDocument.from_dict(sample_document_dict)


@pytest.fixture
def registry():
    return SchemaRegistry(config=AIConfig(timeout_s=5.0))


@pytest.fixture
def make_registry():
    """Factory for registries with a fake generator and config overrides."""

    def _make(result=None, error=None, **config):
        generator = FakeGenerator(result=result, error=error)
        config.setdefault("timeout_s", 5.0)
        return SchemaRegistry(config=AIConfig(**config), generator=generator), generator

    return _make
