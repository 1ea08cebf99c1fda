"""Seed record store, topic research cache and document job queue (SQLite)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from .database import db_connection, get_db_path, init_db
from .logger import LOGGER
from .models import DocumentJob, SeedRecord, TopicResearch


class SeedStore:
    """Durable storage for everything the engine keeps between calls.

    Seed records are written once and never updated. The topic research cache
    is advisory, so writes are plain upserts (last write wins) with no locking.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Args:
            db_path: SQLite file. If None, uses the configured default.
        """
        self.db_path = db_path or get_db_path()
        init_db(self.db_path)
        LOGGER.debug("SeedStore initialized: %s", self.db_path)

    # ------------------------------------------------------------------
    # Seed records
    # ------------------------------------------------------------------

    def create(self, topic: Sequence[str]) -> SeedRecord:
        record = SeedRecord.new(topic)
        with db_connection(self.db_path) as conn:
            conn.execute(
                "INSERT INTO seed_records (session_id, topic, created_at) VALUES (?, ?, ?)",
                (record.session_id, json.dumps(record.topic, ensure_ascii=False), record.created_at.isoformat()),
            )
        LOGGER.info("Created session %s for topic %s", record.session_id, record.topic)
        return record

    def get(self, session_id: str) -> Optional[SeedRecord]:
        with db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT session_id, topic, created_at FROM seed_records WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        if row is None:
            return None
        return SeedRecord(
            session_id=row["session_id"],
            topic=json.loads(row["topic"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # ------------------------------------------------------------------
    # Topic research cache
    # ------------------------------------------------------------------

    def get_research(self, session_id: str) -> Optional[TopicResearch]:
        with db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT payload FROM topic_research WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        if row is None:
            return None
        try:
            return TopicResearch.from_dict(json.loads(row["payload"]))
        except (json.JSONDecodeError, TypeError, AttributeError) as exc:
            LOGGER.warning("Discarding unreadable research cache for %s: %s", session_id, exc)
            return None

    def put_research(self, session_id: str, research: TopicResearch) -> None:
        with db_connection(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO topic_research (session_id, payload, created_at) VALUES (?, ?, ?)",
                (
                    session_id,
                    json.dumps(research.to_dict(), ensure_ascii=False),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
        LOGGER.debug("Cached %d research keywords for %s", len(research.merged()), session_id)

    # ------------------------------------------------------------------
    # Document jobs
    # ------------------------------------------------------------------

    def add_job(self, job: DocumentJob) -> DocumentJob:
        with db_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO document_jobs
                    (job_id, session_id, title, keywords, target_length,
                     article_type, request_text, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    job.job_id,
                    job.session_id,
                    job.title,
                    json.dumps(job.keywords, ensure_ascii=False),
                    job.target_length,
                    job.article_type,
                    job.request_text,
                    job.status,
                    job.created_at.isoformat(),
                ),
            )
        LOGGER.info("Queued document job %s for session %s", job.job_id, job.session_id)
        return job

    def list_jobs(self, session_id: str) -> List[DocumentJob]:
        with db_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM document_jobs WHERE session_id = ? ORDER BY created_at",
                (session_id,),
            ).fetchall()
        return [
            DocumentJob(
                job_id=row["job_id"],
                session_id=row["session_id"],
                title=row["title"],
                keywords=json.loads(row["keywords"]),
                target_length=row["target_length"],
                article_type=row["article_type"],
                request_text=row["request_text"],
                status=row["status"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]


__all__ = ["SeedStore"]
