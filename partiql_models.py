"""Movie records and statement results.

Items come back from DynamoDB as plain mappings with ``Decimal`` numbers.
These models give them named, validated fields so callers always read
``movie.year`` or ``movie.info.rating`` and never index into dictionaries.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MovieInfo(BaseModel):
    """Nested movie details. Fields other than rating and plot are kept as extras."""

    model_config = ConfigDict(extra="allow")

    rating: Decimal | None = Field(default=None, description="Quality rating")
    plot: str | None = Field(default=None, description="Plot summary")


class Movie(BaseModel):
    """A movie keyed by title (partition key) and year (sort key)."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(..., description="Movie title, partition key")
    year: int = Field(..., description="Release year, sort key")
    info: MovieInfo | None = Field(default=None, description="Movie details")

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "Movie":
        """Build a movie from a deserialized DynamoDB item."""
        return cls.model_validate(item)

    def to_item(self) -> dict[str, Any]:
        """Return the movie as a DynamoDB item, leaving out unset fields."""
        return self.model_dump(exclude_none=True)

    @property
    def key(self) -> tuple[str, int]:
        """The (title, year) primary key."""
        return self.title, self.year


class StatementResult(BaseModel):
    """Items returned by a single ExecuteStatement call."""

    items: list[Movie] = Field(default_factory=list)
    next_token: str | None = None

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "StatementResult":
        return cls(
            items=[Movie.from_item(item) for item in response.get("Items", [])],
            next_token=response.get("NextToken"),
        )


class BatchStatementError(BaseModel):
    """Failure reported for one statement in a batch."""

    code: str
    message: str | None = None
    item: dict[str, Any] | None = None


class BatchStatementResponse(BaseModel):
    """Outcome of one statement in a batch."""

    table_name: str | None = None
    item: Movie | None = None
    error: BatchStatementError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "BatchStatementResponse":
        error = response.get("Error")
        item = response.get("Item")
        return cls(
            table_name=response.get("TableName"),
            item=Movie.from_item(item) if item else None,
            error=BatchStatementError(
                code=error["Code"],
                message=error.get("Message"),
                item=error.get("Item"),
            )
            if error
            else None,
        )


class BatchStatementResult(BaseModel):
    """Per-statement outcomes of a BatchExecuteStatement call, in request order."""

    responses: list[BatchStatementResponse] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "BatchStatementResult":
        return cls(
            responses=[
                BatchStatementResponse.from_response(resp)
                for resp in response.get("Responses", [])
            ]
        )

    @property
    def errors(self) -> list[BatchStatementError]:
        return [resp.error for resp in self.responses if resp.error is not None]
