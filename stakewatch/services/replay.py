"""Replays a JSON Lines event export through the dispatcher."""

import json
from pathlib import Path

import structlog
from sqlalchemy.orm import Session

from db.enums import RunStatus, RunType
from db.models import ProcessingRuns
from stakewatch.services._helpers import dump_json, new_id, now_iso
from stakewatch.services.badges import BadgeAwarder
from stakewatch.services.constants import DEFAULT_CONSTANTS, ProtocolConstants
from stakewatch.services.dispatch import EventDispatcher
from stakewatch.services.errors import DispatchError, LedgerError, ReplayError
from stakewatch.services.schemas.events import ChainEvent
from stakewatch.services.schemas.results import ReplayResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

MAX_RECORDED_ERRORS = 100


class EventReplayService:
    """Feeds recorded events to an EventDispatcher in file order."""

    def __init__(
        self,
        session: Session,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
        badges_enabled: bool = True,
    ):
        self.session = session
        self.dispatcher = EventDispatcher(
            session,
            constants,
            badges=BadgeAwarder(session) if badges_enabled else None,
        )

    def _create_run(self, source: str) -> ProcessingRuns:
        run = ProcessingRuns(
            run_id=new_id(),
            run_type=RunType.REPLAY.value,
            started_at=now_iso(),
            status=RunStatus.RUNNING.value,
            source=source,
        )
        self.session.add(run)
        self.session.flush()
        return run

    def _close_run(
        self,
        run: ProcessingRuns,
        processed: int,
        failed: int,
        first_block: int | None,
        last_block: int | None,
    ) -> None:
        run.records_processed = processed + failed
        run.records_created = processed
        run.records_skipped = failed
        run.block_range_start = first_block
        run.block_range_end = last_block
        run.completed_at = now_iso()
        self.session.flush()

    def replay_file(self, path: Path, fail_on_error: bool = False) -> ReplayResult:
        """Dispatch every event in `path`.

        Blank lines are skipped. A line that cannot be parsed or dispatched is
        recorded on the run and skipped, or raised as ReplayError when
        `fail_on_error` is set.
        """
        path = Path(path)
        run = self._create_run(str(path))
        processed = 0
        failed = 0
        badges_awarded = 0
        indexers: set[str] = set()
        first_block: int | None = None
        last_block: int | None = None
        errors: list[str] = []

        logger.info("Replay started", run_id=run.run_id, source=str(path))
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        event = ChainEvent.from_dict(json.loads(line))
                        result = self.dispatcher.process(event)
                    except (json.JSONDecodeError, DispatchError, LedgerError) as e:
                        failed += 1
                        errors.append(f"Line {line_num}: {e}")
                        logger.warning("Event skipped", line=line_num, error=str(e))
                        if fail_on_error:
                            raise ReplayError(f"Line {line_num}: {e}") from e
                        continue

                    processed += 1
                    indexers.add(result.indexer_id)
                    badges_awarded += len(result.badges_awarded)
                    if first_block is None:
                        first_block = event.block.number
                    last_block = event.block.number

            if not errors:
                run.status = RunStatus.SUCCESS.value
            else:
                run.status = RunStatus.PARTIAL.value if processed > 0 else RunStatus.FAILED.value
            if errors:
                run.error_details = dump_json({"event_errors": errors[:MAX_RECORDED_ERRORS]})
        except (OSError, ReplayError) as e:
            logger.exception("Replay failed", run_id=run.run_id)
            run.status = RunStatus.FAILED.value
            run.error_details = dump_json({"error": str(e)})
            self._close_run(run, processed, failed, first_block, last_block)
            if isinstance(e, ReplayError):
                raise
            raise ReplayError(f"Cannot read {path}: {e}") from e

        self._close_run(run, processed, failed, first_block, last_block)

        logger.info(
            "Replay complete",
            run_id=run.run_id,
            status=run.status,
            events_processed=processed,
            events_failed=failed,
            indexers_touched=len(indexers),
        )
        return ReplayResult(
            run_id=run.run_id,
            events_processed=processed,
            events_failed=failed,
            indexers_touched=len(indexers),
            badges_awarded=badges_awarded,
            block_range=(first_block, last_block) if first_block is not None else None,
            errors=errors,
        )
