from pydantic import BaseModel, ConfigDict, Field
from typing import TypeAlias, Literal

ErrorCode: TypeAlias = Literal[
    "InvalidFileName",
    "PathNotFound",
    "FileNotFound",
    "FetchFailed",
    "EmptyCorpus",
]


class ErrorResult(BaseModel):
    """Structured error returned instead of content"""

    error: ErrorCode = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable explanation")


class MatchedTerm(BaseModel):
    term: str = Field(description="Query term or bigram")
    count: int = Field(description="Whole-word occurrences in the document")


class SearchResultItem(BaseModel):
    """One ranked corpus file"""

    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(description="Forward-slash path relative to the corpus root")
    combined_score: float = Field(alias="combinedScore")
    lexical_score: float | None = Field(default=None, alias="lexicalScoreOrNull")
    semantic_score: float | None = Field(default=None, alias="semanticScoreOrNull")
    match_kind: Literal["both", "lexical", "semantic"] = Field(alias="matchKind")
    matched_terms: list[MatchedTerm] = Field(
        default_factory=list, alias="matchedTerms"
    )


class SearchRequest(BaseModel):
    """Search request; version defaults to the newest indexed version"""

    message: str = Field(description="Natural-language query")
    version: int | None = Field(default=None, description="Version filter")
    limit: int | None = Field(default=None, description="Maximum results to return")


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str
    version: int
    semantic_available: bool = Field(alias="semanticAvailable")
    results: list[SearchResultItem]


class StatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    corpus_path: str = Field(alias="corpusPath")
    state: str
    document_embeddings: int = Field(alias="documentEmbeddings")
    semantic_ready: bool = Field(alias="semanticReady")
    highest_version: int = Field(alias="highestVersion")
    failure: str | None = None
