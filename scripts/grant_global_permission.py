#!/usr/bin/env python3
"""
Grant a global permission rule to a person, or list global rule holders.
"""

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from sqlmodel import select

from chemical_inventory.db import session_scope
from chemical_inventory.models import GLOBAL_SCOPE, Permission, Person
from chemical_inventory.rbac import ItemClass, PermissionLevel, PermissionService


def grant_global_permission(person_email: str, level: str, item_class: str) -> bool:
    with session_scope() as session:
        person = session.exec(select(Person).where(Person.person_email == person_email)).first()
        if not person:
            print(f"No person with e-mail {person_email}")
            return False

        permissions = PermissionService(session)
        if permissions.has_permission(person.person_id, level, item_class, GLOBAL_SCOPE):
            print(f"{person_email} already holds '{level}' on '{item_class}' globally")
            return True

        permissions.grant(person.person_id, level, item_class, GLOBAL_SCOPE)
        print(f"Granted '{level}' on '{item_class}' globally to {person_email}")
        return True


def list_global_holders() -> None:
    with session_scope() as session:
        rows = session.exec(
            select(Person, Permission)
            .join(Permission, Permission.person == Person.person_id)
            .where(Permission.permission_entity_id == GLOBAL_SCOPE)
            .order_by(Person.person_email)
        ).all()

        if not rows:
            print("No global permission rules")
            return

        for person, permission in rows:
            print(f"  - {person.person_email}: {permission.permission_perm_name} {permission.permission_item_name}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email", nargs="?", help="e-mail of the person to grant the rule to")
    parser.add_argument("--list", action="store_true", help="show global rule holders")
    parser.add_argument("--level", default=PermissionLevel.ALL.value, choices=[level.value for level in PermissionLevel])
    parser.add_argument("--item", default=ItemClass.ALL.value, choices=[item.value for item in ItemClass])
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    if args.list:
        list_global_holders()
    elif args.email:
        sys.exit(0 if grant_global_permission(args.email, args.level, args.item) else 1)
    else:
        print("Usage: grant_global_permission.py <email> [--level all|r|w] [--item all|...] | --list")
        sys.exit(1)
