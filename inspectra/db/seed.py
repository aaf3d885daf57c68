"""Data seeding for inspectra.

Loads projects, their approval workflows and sample requests from a
YAML seed file into a document store.
"""

import logging
from typing import Any, Dict, List

from inspectra.common.config import ProjectConfig, SeedConfig, load_typed_config
from inspectra.core.entities import Project, ReportItem, TripRequest
from inspectra.services.projects import ProjectService
from inspectra.store.base import DocumentStore
from inspectra.store.repositories import ReportRepository, TripRepository

logger = logging.getLogger(__name__)


def seed_projects(store: DocumentStore, projects: List[ProjectConfig]) -> Dict[str, Project]:
    """
    Create projects with their approval workflows.

    Projects are idempotent - if one with the same name exists, it is kept.

    Args:
        store: Target document store
        projects: Parsed project configurations

    Returns:
        Dict mapping project name to Project
    """
    service = ProjectService(store)
    seeded = {}

    for config in projects:
        existing = service.projects.by_name(config.name)
        if existing:
            seeded[config.name] = existing
            continue

        seeded[config.name] = service.create_project(
            config.name,
            project_id=config.id,
            client=config.client,
            contract_number=config.contract_number,
            branch_id=config.branch_id,
            trip_approval_workflow=config.workflow_documents(config.trip_workflow),
            report_approval_workflow=config.workflow_documents(config.report_workflow),
        )

    return seeded


def seed_documents(store: DocumentStore, record_type, documents: List[Dict[str, Any]]) -> int:
    """
    Store raw trip or report documents, skipping ids already present.

    Documents use the stored camelCase layout, so requests can be seeded
    part-way through their approval chain.
    """
    repository = (TripRepository if record_type is TripRequest else ReportRepository)(store)
    created = 0
    for data in documents:
        doc_id = data.get("id")
        if not doc_id:
            raise ValueError(f"Seeded {record_type.collection} document has no id: {data!r}")
        if repository.get(str(doc_id)) is not None:
            continue
        repository.create(record_type.from_document(str(doc_id), data))
        created += 1
    return created


def seed_store(store: DocumentStore, config: SeedConfig) -> Dict[str, int]:
    """Seed everything described by ``config``; returns counts per collection."""
    projects = seed_projects(store, config.projects)
    counts = {
        "projects": len(projects),
        "trips": seed_documents(store, TripRequest, config.trips),
        "reports": seed_documents(store, ReportItem, config.reports),
    }
    logger.info("Seeded %(projects)d project(s), %(trips)d trip(s), %(reports)d report(s)", counts)
    return counts


def seed_from_file(store: DocumentStore, path: str) -> Dict[str, int]:
    return seed_store(store, load_typed_config(path))


# CLI script for seeding
if __name__ == "__main__":
    import sys
    from inspectra.db.session import engine_from_settings
    from inspectra.store.sql import SqlDocumentStore

    if len(sys.argv) != 2:
        print("Usage: python -m inspectra.db.seed <seed.yaml>")
        sys.exit(2)

    engine = engine_from_settings()
    try:
        counts = seed_from_file(SqlDocumentStore(engine), sys.argv[1])
        print(f"Seeded {counts['projects']} project(s):")
        for project in ProjectService(SqlDocumentStore(engine, create_schema=False)).list_projects():
            print(
                f"  - {project.name}: {len(project.trip_approval_workflow)} trip stage(s), "
                f"{len(project.report_approval_workflow)} report stage(s)"
            )
        print(f"Seeded {counts['trips']} trip(s) and {counts['reports']} report(s)")
        print("\nSeeding complete!")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
