"""Unit tests for the alembic revisions, run against a recording `op`."""

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

VERSIONS = Path(__file__).resolve().parents[2] / "alembic" / "versions"


class _RecordingOp:
    def __init__(self) -> None:
        self.statements: list[str] = []

    def execute(self, sql: str) -> None:
        self.statements.append(" ".join(sql.split()))

    def sql(self) -> str:
        return "\n".join(self.statements)


def _load(path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"migration_{path.stem}", path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def revisions() -> dict[str, ModuleType]:
    modules = [_load(path) for path in sorted(VERSIONS.glob("0*.py"))]
    return {module.revision: module for module in modules}


def _upgrade(module: ModuleType, monkeypatch: pytest.MonkeyPatch) -> str:
    recorder = _RecordingOp()
    monkeypatch.setattr(module, "op", recorder)
    module.upgrade()
    return recorder.sql()


class TestRevisionChain:
    def test_single_linear_history(self, revisions: dict[str, ModuleType]) -> None:
        assert sorted(revisions) == ["001", "002", "003", "004", "005"]
        assert revisions["001"].down_revision is None
        for previous, current in zip(["001", "002", "003", "004"], ["002", "003", "004", "005"]):
            assert revisions[current].down_revision == previous

    def test_every_revision_can_downgrade(
        self, revisions: dict[str, ModuleType], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        for module in revisions.values():
            recorder = _RecordingOp()
            monkeypatch.setattr(module, "op", recorder)
            module.downgrade()
            assert recorder.statements


class TestBytes32Columns:
    def test_common_functions_define_hex_check(
        self, revisions: dict[str, ModuleType], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        sql = _upgrade(revisions["001"], monkeypatch)
        assert "FUNCTION fn_update_timestamp()" in sql
        assert "FUNCTION fn_is_bytes32_hex(value TEXT)" in sql
        assert "'^0x[0-9a-f]{64}$'" in sql

    def test_used_nonces_checked(
        self, revisions: dict[str, ModuleType], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        sql = _upgrade(revisions["002"], monkeypatch)
        assert "CHECK (fn_is_bytes32_hex(nonce))" in sql

    def test_registry_hashes_and_proof_nonces_checked(
        self, revisions: dict[str, ModuleType], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        sql = _upgrade(revisions["004"], monkeypatch)
        assert "CHECK (fn_is_bytes32_hex(data_hash))" in sql
        assert "PRIMARY KEY CHECK (fn_is_bytes32_hex(nonce))" in sql

    def test_legacy_fold_writes_lowercase_padded_hex(
        self, revisions: dict[str, ModuleType], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        sql = _upgrade(revisions["005"], monkeypatch)
        assert "'0x' || lpad(to_hex(nonce::BIGINT), 64, '0')" in sql
