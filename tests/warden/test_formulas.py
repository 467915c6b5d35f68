from __future__ import annotations

from pathlib import Path

import pytest

from tests.warden.helpers import make_workspace
from warden import config, formulas, paths

FORMULA = "mol-polecat-work.formula.toml"


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return make_workspace(tmp_path / "town")


def _installed(root: Path) -> Path:
    return paths.formulas_dir(root) / FORMULA


def test_bundled_formulas_include_polecat_work() -> None:
    bundled = formulas.bundled_formulas()

    assert FORMULA in bundled
    assert "Load context" in bundled[FORMULA]


@pytest.mark.parametrize(
    ("installed", "recorded", "expected"),
    [
        (None, None, formulas.FormulaState.NEW),
        (None, "old", formulas.FormulaState.MISSING),
        ("bundled", None, formulas.FormulaState.UNTRACKED),
        ("local", None, formulas.FormulaState.MODIFIED),
        ("bundled", "old", formulas.FormulaState.OK),
        ("old", "old", formulas.FormulaState.OUTDATED),
        ("local", "old", formulas.FormulaState.MODIFIED),
    ],
)
def test_classify(installed: str | None, recorded: str | None, expected) -> None:
    recorded_hash = config.hash_text(recorded) if recorded is not None else None

    assert formulas.classify(installed, "bundled", recorded_hash) is expected


def test_fresh_workspace_installs_new_formulas(root: Path) -> None:
    report = formulas.check_formula_health(root)
    assert report.new == len(formulas.bundled_formulas())
    assert report.needs_update == report.new

    updated, skipped, reinstalled = formulas.update_formulas(root)

    assert (updated, skipped, reinstalled) == (len(formulas.bundled_formulas()), 0, 0)
    assert _installed(root).read_text(encoding="utf-8") == formulas.bundled_formulas()[FORMULA]
    assert formulas.load_install_record(root)[FORMULA] == config.hash_text(
        formulas.bundled_formulas()[FORMULA]
    )
    assert formulas.check_formula_health(root).needs_update == 0


def test_update_is_idempotent(root: Path) -> None:
    formulas.update_formulas(root)

    assert formulas.update_formulas(root) == (0, 0, 0)


def test_deleted_formula_is_reinstalled(root: Path) -> None:
    formulas.update_formulas(root)
    _installed(root).unlink()

    assert formulas.check_formula_health(root).missing == 1
    updated, skipped, reinstalled = formulas.update_formulas(root)

    assert reinstalled == 1
    assert _installed(root).exists()


def test_locally_edited_formula_is_skipped(root: Path) -> None:
    formulas.update_formulas(root)
    _installed(root).write_text("# my tweaks\n", encoding="utf-8")

    assert formulas.check_formula_health(root).modified == 1
    updated, skipped, reinstalled = formulas.update_formulas(root)

    assert skipped == 1
    assert _installed(root).read_text(encoding="utf-8") == "# my tweaks\n"


def test_stale_copy_from_previous_release_is_refreshed(root: Path) -> None:
    formulas.update_formulas(root)
    _installed(root).write_text("# previous release\n", encoding="utf-8")
    formulas.write_install_record(root, {FORMULA: config.hash_text("# previous release\n")})

    assert formulas.check_formula_health(root).states[FORMULA] is formulas.FormulaState.OUTDATED
    updated, skipped, reinstalled = formulas.update_formulas(root)

    assert updated == 1
    assert _installed(root).read_text(encoding="utf-8") == formulas.bundled_formulas()[FORMULA]


def test_untracked_identical_copy_is_adopted_without_rewrite(root: Path) -> None:
    target = _installed(root)
    target.parent.mkdir(parents=True)
    target.write_text(formulas.bundled_formulas()[FORMULA], encoding="utf-8")

    assert formulas.check_formula_health(root).untracked == 1
    updated, _skipped, _reinstalled = formulas.update_formulas(root)

    assert updated == 1
    assert FORMULA in formulas.load_install_record(root)


def test_unreadable_install_record_counts_as_empty(root: Path) -> None:
    record = formulas.install_record_path(root)
    record.parent.mkdir(parents=True)
    record.write_text("{ nope", encoding="utf-8")

    assert formulas.load_install_record(root) == {}


def test_undecodable_formula_and_record_do_not_abort_refresh(root: Path) -> None:
    formulas.update_formulas(root)
    _installed(root).write_bytes(b"# edited \xff\n")
    formulas.install_record_path(root).write_bytes(b'{"formulas": "\xff"}')

    assert formulas.load_install_record(root) == {}
    updated, skipped, reinstalled = formulas.update_formulas(root)

    assert (updated, skipped, reinstalled) == (0, 1, 0)
    assert _installed(root).read_bytes() == b"# edited \xff\n"


def test_formula_store_delegates(root: Path) -> None:
    store = formulas.FormulaStore()

    assert store.check_health(root).new >= 1
    assert store.update(root)[0] >= 1
