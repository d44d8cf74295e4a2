#!/usr/bin/env python3
"""Validate local BTO portal environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bto.domain.models import FlatType, MaritalStatus
from bto.domain.eligibility import applicant_eligible
from bto.repository.data_repository import DataRepository
from bto.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="bto-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = ["fastapi", "uvicorn", "pydantic", "pandas", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        base_settings = get_settings()
        validation_settings = replace(
            base_settings,
            database_path=Path(temp_dir) / "bto_validation.db",
            password_hash_iterations=1_000,
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: CSV seed data
        try:
            repository.seed_from_csv(validation_settings.seed_data_dir)
            users = len(repository.list_users())
            projects = len(repository.list_projects())
            if users == 0 or projects == 0:
                raise RuntimeError(
                    f"expected seeded users and projects in {validation_settings.seed_data_dir}, "
                    f"got users={users} projects={projects}"
                )
            ok, line = _print_result(
                "Seed data", True, f": {users} users, {projects} projects"
            )
        except Exception as exc:
            ok, line = _print_result("Seed data", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Eligibility rules
        expectations = [
            ((34, MaritalStatus.SINGLE, FlatType.TWO_ROOM), False),
            ((35, MaritalStatus.SINGLE, FlatType.TWO_ROOM), True),
            ((21, MaritalStatus.MARRIED, FlatType.THREE_ROOM), True),
            ((20, MaritalStatus.MARRIED, FlatType.TWO_ROOM), False),
        ]
        mismatches = [
            args for args, expected in expectations if applicant_eligible(*args) != expected
        ]
        if mismatches:
            ok, line = _print_result("Eligibility rules", False, f"mismatch for {mismatches}")
        else:
            ok, line = _print_result("Eligibility rules", True)
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" BTO Portal Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
