"""Domain exceptions for the clinical decision engine.

Absence of data (no assessment, no protocol, no outcome rows) is never an
exception; these cover programming and configuration errors only.
"""


class ClinicalEngineError(Exception):
    """Base class for decision engine errors."""


class CatalogError(ClinicalEngineError):
    """The exercise catalog data is malformed."""


class UnknownQuestionnaireError(ClinicalEngineError):
    """A questionnaire key has no scoring rule or instrument entry."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown questionnaire type: {key}")
