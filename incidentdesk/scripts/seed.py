"""
Seed Data Script
================

Fills the incidents table with synthetic records for local development.

Usage:
    python -m incidentdesk.scripts.seed              # replace with 200 incidents
    python -m incidentdesk.scripts.seed --count 50   # replace with 50 incidents
    python -m incidentdesk.scripts.seed --keep       # append instead of replacing
"""

import argparse
import random
import sys
from datetime import datetime, timedelta, UTC
from typing import Optional

from sqlalchemy.orm import Session

from incidentdesk.core.enums import IncidentStatus, Severity
from incidentdesk.core.exceptions import StorageError
from incidentdesk.core.logging import LogContext, configure_logging, get_logger, log_execution_time
from incidentdesk.core.timestamps import format_timestamp
from incidentdesk.db.session import SessionLocal, init_db
from incidentdesk.models.incident import Incident
from incidentdesk.services.incident_service import generate_incident_id
from incidentdesk.services.incident_store import IncidentStore

logger = get_logger(__name__)

SERVICES = [
    "API Gateway",
    "Auth Service",
    "Payment Processor",
    "Database",
    "Cache Layer",
    "Load Balancer",
    "Message Queue",
    "Search Engine",
    "Email Service",
    "Notification Hub",
]

TITLES = [
    "API timeout errors",
    "Database connection pool exhausted",
    "Memory leak in background service",
    "SSL certificate expiration warning",
    "High latency detected",
    "Increased error rate",
    "Payment processing delays",
    "Notification delivery failures",
    "Search index corruption",
    "Cache invalidation issue",
]

SUMMARIES = [
    "The service is experiencing intermittent failures. Root cause analysis in progress.",
    "Traffic spike detected. Scaling up resources to handle increased load.",
    "Database queries timing out. Query optimization needed.",
    "Third-party service dependency is degraded. Waiting for vendor resolution.",
    "Configuration change caused unexpected behavior. Rolling back changes.",
    "Resource limit reached. Need to provision additional infrastructure.",
    "Suspicious activity detected in logs. Security team investigating.",
    "Customer complaints about feature unavailability. Engineering team on it.",
]

HISTORY_DAYS = 90
MAX_UPDATE_LAG_DAYS = 30
OWNER_RATE = 0.7
OWNER_POOL = 20


def generate_incident(index: int, rng: random.Random, now: Optional[datetime] = None) -> Incident:
    """
    Build one synthetic incident created within the last 90 days.

    updatedAt lands up to 30 days after createdAt, capped at now.
    """
    now = now or datetime.now(UTC)
    created = now - timedelta(days=rng.randrange(HISTORY_DAYS), seconds=rng.randrange(86400))
    updated = min(now, created + timedelta(seconds=rng.uniform(0, MAX_UPDATE_LAG_DAYS * 86400)))

    return Incident(
        id=generate_incident_id(),
        title=f"{TITLES[index % len(TITLES)]} #{index}",
        service=rng.choice(SERVICES),
        severity=rng.choice(list(Severity)).value,
        status=rng.choice(list(IncidentStatus)).value,
        owner=f"engineer-{rng.randint(1, OWNER_POOL)}" if rng.random() < OWNER_RATE else None,
        summary=rng.choice(SUMMARIES),
        created_at=format_timestamp(created),
        updated_at=format_timestamp(updated),
    )


@log_execution_time(logger, "seed_incidents")
def seed(db: Session, count: int = 200, replace: bool = True, rng: Optional[random.Random] = None) -> int:
    """
    Insert ``count`` synthetic incidents.

    Args:
        db: Database session
        count: Number of incidents to create
        replace: Delete existing incidents first
        rng: Random source (seed it for reproducible data)

    Returns:
        Number of incidents in the table afterwards
    """
    rng = rng or random.Random()
    store = IncidentStore(db)

    if replace:
        deleted = db.query(Incident).delete()
        db.commit()
        logger.info("seed_cleared_incidents", deleted=deleted)

    for index in range(count):
        store.insert(generate_incident(index, rng))

    total = db.query(Incident).count()
    logger.info("seed_finished", inserted=count, total=total)
    return total


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the incidents table with synthetic data")
    parser.add_argument("--count", type=int, default=200, help="Number of incidents to insert")
    parser.add_argument("--keep", action="store_true", help="Keep existing incidents")
    parser.add_argument("--random-seed", type=int, default=None, help="Seed for reproducible data")
    args = parser.parse_args(argv)

    configure_logging()

    with LogContext(request_id="seed"):
        init_db()
        db = SessionLocal()
        try:
            seed(db, count=args.count, replace=not args.keep, rng=random.Random(args.random_seed))
        except StorageError as e:
            logger.error("seed_failed", error=e.message)
            return 1
        finally:
            db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
