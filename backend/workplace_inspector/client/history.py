"""Local history of completed analyses, newest first, capped at ``HISTORY_LIMIT``."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from workplace_inspector.services.ai.vision.contracts import AnalysisMode, AnalysisResult, RiskLevel

from .storage import KeyValueStore, load_json, save_json

logger = logging.getLogger(__name__)

HISTORY_KEY = "wi_history_v1"
HISTORY_LIMIT = 20


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_history_id(now_ms: int | None = None) -> str:
    return f"{now_ms if now_ms is not None else _now_ms()}_{secrets.token_hex(6)}"


class HistoryItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    created_at: int = Field(alias="createdAt")
    mode: AnalysisMode
    risk_level: RiskLevel = Field(alias="riskLevel")
    what_i_see: str = Field(default="", alias="whatISee")
    what_this_means: str = Field(default="", alias="whatThisMeans")
    possible_issues: str = Field(default="", alias="possibleIssues")
    what_you_can_do_next: str = Field(default="", alias="whatYouCanDoNext")
    raw: Optional[str] = None
    image_data_url: Optional[str] = Field(default=None, alias="imageDataUrl")

    @classmethod
    def from_result(
        cls,
        result: AnalysisResult,
        mode: AnalysisMode,
        *,
        image_data_url: Optional[str] = None,
        item_id: Optional[str] = None,
        created_at: Optional[int] = None,
    ) -> "HistoryItem":
        created = created_at if created_at is not None else _now_ms()
        return cls(
            id=item_id or new_history_id(created),
            created_at=created,
            mode=mode,
            risk_level=result.risk_level,
            what_i_see=result.what_i_see,
            what_this_means=result.what_this_means,
            possible_issues=result.possible_issues,
            what_you_can_do_next=result.what_you_can_do_next,
            raw=result.raw,
            image_data_url=image_data_url,
        )

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            what_i_see=self.what_i_see,
            what_this_means=self.what_this_means,
            possible_issues=self.possible_issues,
            what_you_can_do_next=self.what_you_can_do_next,
            risk_level=self.risk_level,
            raw=self.raw or "",
        )


@dataclass(frozen=True)
class ReopenedAnalysis:
    """A history entry loaded back into the active view."""

    result: AnalysisResult
    mode: AnalysisMode
    image_data_url: Optional[str]
    created_at: int


class HistoryCache:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        limit: int = HISTORY_LIMIT,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self.limit = limit
        self._clock_ms = clock_ms

    def list(self) -> list[HistoryItem]:
        """All stored items, newest first. Malformed entries are skipped."""
        data = load_json(self._store, HISTORY_KEY, [])
        if not isinstance(data, list):
            return []
        items: list[HistoryItem] = []
        for entry in data:
            try:
                items.append(HistoryItem.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed history entry")
        return items

    def _save(self, items: list[HistoryItem]) -> None:
        save_json(
            self._store,
            HISTORY_KEY,
            [item.model_dump(by_alias=True, mode="json", exclude_none=True) for item in items],
        )

    def append(self, item: HistoryItem) -> list[HistoryItem]:
        items = [item, *self.list()][: self.limit]
        self._save(items)
        return items

    def add_result(
        self,
        result: AnalysisResult,
        mode: AnalysisMode,
        *,
        image_data_url: Optional[str] = None,
    ) -> HistoryItem:
        item = HistoryItem.from_result(result, mode, image_data_url=image_data_url, created_at=self._clock_ms())
        self.append(item)
        return item

    def get(self, item_id: str) -> Optional[HistoryItem]:
        return next((item for item in self.list() if item.id == item_id), None)

    def reopen(self, item_id: str) -> Optional[ReopenedAnalysis]:
        item = self.get(item_id)
        if item is None:
            return None
        return ReopenedAnalysis(
            result=item.to_result(),
            mode=item.mode,
            image_data_url=item.image_data_url,
            created_at=item.created_at,
        )

    def clear(self) -> None:
        self._store.delete(HISTORY_KEY)
