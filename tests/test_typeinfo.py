"""Tests for type classification and target resolution."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

import pytest

from sample_models import (
    AnotacaoAninhada,
    Endereco,
    Ignorados,
    ModeloBasico,
    Status,
    TiposCompletos,
)
from typegorm.errors import InvalidInputError
from typegorm.metadata.typeinfo import TypeKind, classify, inspect_fields, resolve_target
from typegorm.nulltypes import NullString


class TestClassify:

    @pytest.mark.parametrize("hint", [str, int, float, bool, bytes, Decimal, datetime, Status])
    def test_scalars(self, hint):
        assert classify(hint).kind is TypeKind.SCALAR

    def test_optional_is_pointer(self):
        result = classify(Optional[int])
        assert result.kind is TypeKind.POINTER
        assert result.inner.kind is TypeKind.SCALAR
        assert str(result) == "Optional[int]"

    def test_optional_record(self):
        result = classify(Optional[Endereco])
        assert result.kind is TypeKind.POINTER
        assert result.inner.kind is TypeKind.RECORD
        assert result.inner.python_type is Endereco

    @pytest.mark.parametrize("hint", [List[Endereco], Tuple[Endereco, ...], Set[int], list])
    def test_sequences(self, hint):
        assert classify(hint).kind is TypeKind.SEQUENCE

    def test_sequence_inner(self):
        result = classify(List[Optional[Endereco]])
        assert result.inner.kind is TypeKind.POINTER
        assert result.inner.inner.python_type is Endereco

    @pytest.mark.parametrize("hint", [Dict[str, Any], dict])
    def test_maps(self, hint):
        assert classify(hint).kind is TypeKind.MAP

    @pytest.mark.parametrize("hint", [Any, object, Union[int, str]])
    def test_interfaces(self, hint):
        assert classify(hint).kind is TypeKind.INTERFACE

    def test_optional_union_is_pointer_to_interface(self):
        result = classify(Optional[Union[int, str]])
        assert result.kind is TypeKind.POINTER
        assert result.inner.kind is TypeKind.INTERFACE

    def test_callable(self):
        assert classify(Callable[[], None]).kind is TypeKind.FUNCTION

    def test_records(self):
        assert classify(Endereco).kind is TypeKind.RECORD
        assert classify(NullString).kind is TypeKind.RECORD


class TestResolveTarget:

    def test_class(self):
        resolved = resolve_target(ModeloBasico)
        assert resolved.cls is ModeloBasico
        assert resolved.is_class is True

    def test_instance(self):
        resolved = resolve_target(TiposCompletos())
        assert resolved.cls is TiposCompletos
        assert resolved.is_class is False

    def test_none(self):
        with pytest.raises(InvalidInputError, match="cannot be None"):
            resolve_target(None)

    def test_scalar_instance(self):
        with pytest.raises(InvalidInputError, match=r"got int \(scalar\)"):
            resolve_target(42)

    def test_scalar_class(self):
        with pytest.raises(InvalidInputError, match=r"got type\[int\] \(scalar\)"):
            resolve_target(int)

    def test_generic_alias(self):
        with pytest.raises(InvalidInputError):
            resolve_target(List[ModeloBasico])

    def test_invalid_input_is_type_error(self):
        with pytest.raises(TypeError):
            resolve_target("not a record")


class TestInspectFields:

    def test_declaration_order_and_annotations(self):
        fields = list(inspect_fields(ModeloBasico))

        assert [f.name for f in fields] == ["ID", "Nome", "Email", "Ativo", "Bio", "_privado"]
        assert fields[0].annotation == "primaryKey;autoIncrement"
        assert fields[2].annotation == ""
        assert fields[4].annotation == "-"
        assert fields[5].exported is False

    def test_dataclass_metadata(self):
        fields = {f.name: f for f in inspect_fields(TiposCompletos)}

        assert fields["id"].annotation == "pk"
        assert fields["deletado_em"].annotation == "deletedAt;index"
        assert fields["data_nula"].annotation == ""

    def test_class_vars_are_not_fields(self):
        names = [f.name for f in inspect_fields(Ignorados)]
        assert "versao" not in names
        assert "status" in names

    def test_annotated_is_unwrapped(self):
        field = next(f for f in inspect_fields(ModeloBasico) if f.name == "ID")
        assert field.type.kind is TypeKind.SCALAR
        assert field.python_type == "int"

    def test_unresolvable_hint(self):
        class Broken:
            campo: "TipoInexistente"  # noqa: F821

        with pytest.raises(InvalidInputError, match="cannot resolve type hints"):
            list(inspect_fields(Broken))

    def test_field_index_counts_only_fields(self):
        fields = list(inspect_fields(Ignorados))

        assert [f.index for f in fields] == list(range(len(fields)))
        assert fields[-1].name == "_interno"
        assert fields[-1].index == 9

    def test_annotation_inside_optional(self):
        field = next(f for f in inspect_fields(AnotacaoAninhada) if f.name == "id")

        assert field.annotation == "pk"
        assert field.type.kind is TypeKind.POINTER
        assert field.python_type == "Optional[int]"

    def test_annotation_nested_deeper_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            fields = {f.name: f for f in inspect_fields(AnotacaoAninhada)}

        assert fields["posts"].annotation == ""
        assert "nested inside" in caplog.text
        assert "AnotacaoAninhada.posts" in caplog.text
