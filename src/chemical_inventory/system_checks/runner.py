"""Health check runner."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, Protocol

from sqlalchemy import func, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from chemical_inventory.db import get_engine
from chemical_inventory.logging import logger
from chemical_inventory.models import GLOBAL_SCOPE, Permission
from chemical_inventory.rbac import ItemClass, PermissionLevel


class Check(Protocol):
    name: str

    async def run(self) -> "CheckResult":
        ...


@dataclass(slots=True)
class CheckResult:
    name: str
    ok: bool
    details: str


class DatabaseCheck:
    name = "database"

    def __init__(self, engine: Engine | None = None):
        self.engine = engine

    async def run(self) -> CheckResult:
        engine = self.engine or get_engine()
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1")).fetchone()
        except SQLAlchemyError as exc:
            return CheckResult(name=self.name, ok=False, details=str(exc))
        return CheckResult(name=self.name, ok=True, details=f"{engine.dialect.name} reachable")


class SchemaCheck:
    """Every mapped table exists."""

    name = "schema"

    def __init__(self, engine: Engine | None = None):
        self.engine = engine

    async def run(self) -> CheckResult:
        engine = self.engine or get_engine()
        try:
            present = set(inspect(engine).get_table_names())
        except SQLAlchemyError as exc:
            return CheckResult(name=self.name, ok=False, details=str(exc))
        missing = sorted(set(SQLModel.metadata.tables) - present)
        if missing:
            return CheckResult(name=self.name, ok=False, details=f"missing tables: {', '.join(missing)}")
        return CheckResult(name=self.name, ok=True, details=f"{len(present)} tables present")


class AdministratorCheck:
    """At least one person holds the global ``all/all`` rule."""

    name = "administrator"

    def __init__(self, engine: Engine | None = None):
        self.engine = engine

    async def run(self) -> CheckResult:
        stmt = select(func.count()).select_from(Permission).where(
            Permission.permission_perm_name == PermissionLevel.ALL.value,
            Permission.permission_item_name == ItemClass.ALL.value,
            Permission.permission_entity_id == GLOBAL_SCOPE,
        )
        try:
            with Session(self.engine or get_engine()) as session:
                holders = session.exec(stmt).one()
        except SQLAlchemyError as exc:
            return CheckResult(name=self.name, ok=False, details=str(exc))
        if not holders:
            return CheckResult(name=self.name, ok=False, details="no global administrator rule")
        return CheckResult(name=self.name, ok=True, details=f"{holders} global administrator rule(s)")


def default_checks(engine: Engine | None = None) -> list[Check]:
    return [DatabaseCheck(engine), SchemaCheck(engine), AdministratorCheck(engine)]


async def run_checks(checks: Iterable[Check] | None = None) -> list[CheckResult]:
    checks = list(checks or default_checks())
    results = await asyncio.gather(*(check.run() for check in checks))
    status = all(result.ok for result in results)
    for result in results:
        if result.ok:
            logger.info("Health check passed", check=result.name, details=result.details)
        else:
            logger.error("Health check failed", check=result.name, details=result.details)
    logger.info("Overall health", ok=status)
    return results
