import pytest
from pydantic import ValidationError

from versolve.solver.exceptions import RepositoryError
from versolve.solver.repository import InMemoryRepository, PackageRecord
from versolve.solver.version import Constraint, Version


class TestPackageRecord:
    """Tests for versolve.solver.repository.PackageRecord."""

    def test_fields_accept_text(self):
        record = PackageRecord(
            name="elm/core",
            version="1.0.5",  # type: ignore[arg-type]
            compiler_constraint="0.19.0 <= v < 0.20.0",  # type: ignore[arg-type]
            dependencies={"elm/json": "1.0.0 <= v < 2.0.0"},  # type: ignore[dict-item]
        )
        assert record.version == Version(1, 0, 5)
        assert record.compiler_constraint == Constraint.parse("0.19.0 <= v < 0.20.0")
        assert record.dependencies == {"elm/json": Constraint.parse("1.0.0 <= v < 2.0.0")}

    def test_invalid_dependency_range(self):
        with pytest.raises(ValidationError):
            PackageRecord(name="a", version=Version(1, 0, 0), dependencies={"b": "not a range"})  # type: ignore[dict-item]

    def test_negative_version_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            PackageRecord(name="A", version=Version(-1, 0, 0))

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            PackageRecord(name="a", version=Version(1, 0, 0), license="MIT")  # type: ignore[call-arg]

    def test_is_frozen(self):
        record = PackageRecord(name="a", version=Version(1, 0, 0))
        with pytest.raises(ValidationError):
            record.name = "b"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("compiler", "expected"),
        [
            (Version(0, 19, 0), True),
            (Version(0, 19, 1), True),
            (Version(0, 18, 0), False),
            (Version(0, 20, 0), False),
        ],
    )
    def test_supports_compiler(self, compiler: Version, expected: bool):
        record = PackageRecord(name="a", version=Version(1, 0, 0), compiler_constraint=Constraint.parse("0.19.0 <= v < 0.20.0"))
        assert record.supports_compiler(compiler) == expected

    def test_no_compiler_constraint_supports_everything(self):
        assert PackageRecord(name="a", version=Version(1, 0, 0)).supports_compiler(Version(99, 0, 0))

    def test_str(self):
        assert str(PackageRecord(name="a", version=Version(1, 2, 3))) == "a@1.2.3"


class TestInMemoryRepository:
    """Tests for versolve.solver.repository.InMemoryRepository."""

    def test_records_grouped_by_name(self):
        records = [
            PackageRecord(name="b", version=Version(1, 0, 0)),
            PackageRecord(name="a", version=Version(1, 0, 0)),
            PackageRecord(name="b", version=Version(2, 0, 0)),
        ]
        repository = InMemoryRepository(records, compiler_version=Version(0, 19, 1))
        assert [record.version for record in repository.records_of("b")] == [Version(1, 0, 0), Version(2, 0, 0)]
        assert repository.package_names == ["a", "b"]
        assert repository.compiler_version == Version(0, 19, 1)

    def test_unknown_name_has_no_records(self):
        repository = InMemoryRepository([], compiler_version=Version(0, 19, 1))
        assert repository.records_of("missing") == ()

    def test_duplicate_record_rejected(self):
        records = [
            PackageRecord(name="a", version=Version(1, 0, 0)),
            PackageRecord(name="a", version=Version(1, 0, 0), dependencies={"b": Constraint.parse("1.0.0 <= v < 2.0.0")}),
        ]
        with pytest.raises(RepositoryError, match="Duplicate package record a@1.0.0"):
            InMemoryRepository(records, compiler_version=Version(0, 19, 1))
