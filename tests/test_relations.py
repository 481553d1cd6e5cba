"""Tests for relation parsing and validation."""

import pytest

from sample_models import (
    ArtigoRel,
    Categoria,
    Comentario,
    ErrRelMtoSemJoinColumn,
    ErrRelOtmSemMappedBy,
    ErrRelOtoInversoSemMappedBy,
    Perfil,
    Post,
    RelacaoErroAlvoInvalido,
    RelacaoErroConflito,
    RelacaoErroJoinColumnVazio,
    RelacaoErroJoinTableErrado,
    RelacaoErroMtmInversoComTabela,
    RelacaoErroMtmSemTabela,
    RelacaoErroTipo,
    UsuarioRel,
)
from typegorm.errors import (
    EntityParseError,
    RelationConfigError,
    RelationTargetError,
    RelationTypeError,
)
from typegorm.metadata.parser import EntityParser
from typegorm.metadata.relations import parse_join_column
from typegorm.metadata.validation import FieldOutcome
from typegorm.models import RelationType

VALID_MODELS = [UsuarioRel, Perfil, Post, Categoria, ArtigoRel, Comentario]


class TestOneToOne:

    def test_owning_side(self, registry):
        rel = registry.parse(UsuarioRel).get_relation("perfil")

        assert rel.relation_type is RelationType.ONE_TO_ONE
        assert rel.is_owning_side is True
        assert rel.target_entity_type is Perfil
        assert rel.target_entity_name == "Perfil"
        assert [(jc.column_name, jc.referenced_column_name) for jc in rel.join_columns] == [
            ("perfil_fk", "id")
        ]
        assert rel.mapped_by_field_name == ""

    def test_inverse_side(self, registry):
        rel = registry.parse(Perfil).get_relation("usuario")

        assert rel.relation_type is RelationType.ONE_TO_ONE
        assert rel.is_owning_side is False
        assert rel.target_entity_type is UsuarioRel
        assert rel.join_columns == ()
        assert rel.mapped_by_field_name == "perfil"

    def test_sides_agree(self, registry):
        owning = registry.parse(UsuarioRel).get_relation("perfil")
        inverse = registry.parse(Perfil).get_relation("usuario")

        assert inverse.mapped_by_field_name == owning.field_name
        assert owning.target_entity_type is inverse.entity.record_type
        assert inverse.target_entity_type is owning.entity.record_type


class TestOneToManyAndManyToOne:

    def test_one_to_many(self, registry):
        rel = registry.parse(UsuarioRel).get_relation("posts")

        assert rel.relation_type is RelationType.ONE_TO_MANY
        assert rel.is_owning_side is False
        assert rel.target_entity_type is Post
        assert rel.mapped_by_field_name == "autor"

    def test_many_to_one(self, registry):
        meta = registry.parse(Post)
        rel = meta.get_relation("autor")

        assert rel.relation_type is RelationType.MANY_TO_ONE
        assert rel.is_owning_side is True
        assert rel.target_entity_type is UsuarioRel
        assert rel.join_columns[0].column_name == "autor_id"
        # the foreign key field is still a column of its own
        assert meta.get_column("autor_id") is not None
        assert meta.get_column("autor") is None

    def test_mapped_by_names_owning_field(self, registry):
        inverse = registry.parse(UsuarioRel).get_relation("posts")
        owning = registry.parse(Post).get_relation(inverse.mapped_by_field_name)

        assert owning is not None
        assert owning.target_entity_type is UsuarioRel

    def test_referenced_column_and_plain_record_field(self, registry):
        rel = registry.parse(Comentario).get_relation("post")

        assert rel.target_entity_type is Post
        assert rel.join_columns[0].column_name == "post_uuid"
        assert rel.join_columns[0].referenced_column_name == "uuid"

    def test_relations_are_not_columns(self, registry):
        meta = registry.parse(UsuarioRel)
        assert meta.column_names == ["id", "nome"]
        assert [r.field_name for r in meta.relations] == ["perfil", "posts"]


class TestManyToMany:

    def test_owning_side(self, registry):
        rel = registry.parse(ArtigoRel).get_relation("categorias")

        assert rel.relation_type is RelationType.MANY_TO_MANY
        assert rel.is_owning_side is True
        assert rel.join_table_name == "artigo_categorias"
        assert rel.target_entity_type is Categoria

    def test_inverse_side(self, registry):
        rel = registry.parse(Categoria).get_relation("artigos")

        assert rel.is_owning_side is False
        assert rel.join_table_name == ""
        assert rel.mapped_by_field_name == "categorias"
        assert rel.target_entity_type is ArtigoRel


class TestRelationInvariants:

    @pytest.mark.parametrize("model", VALID_MODELS)
    def test_join_columns_and_mapped_by_exclusive(self, registry, model):
        for rel in registry.parse(model).relations:
            assert not (rel.join_columns and rel.mapped_by_field_name)

    @pytest.mark.parametrize("model", VALID_MODELS)
    def test_many_to_many_sides(self, registry, model):
        for rel in registry.parse(model).relations:
            if rel.relation_type is not RelationType.MANY_TO_MANY:
                assert rel.join_table_name == ""
                continue
            if rel.is_owning_side:
                assert rel.join_table_name and not rel.mapped_by_field_name
            else:
                assert rel.mapped_by_field_name and not rel.join_table_name


class TestRelationErrors:

    @pytest.mark.parametrize("model,error_type,fragment", [
        (RelacaoErroTipo, RelationTypeError, "invalid relation type 'one-to-many-invalid'"),
        (RelacaoErroConflito, RelationConfigError, "conflicting tags 'joinColumn' and 'mappedBy'"),
        (RelacaoErroMtmSemTabela, RelationConfigError, "requires 'joinTable'"),
        (RelacaoErroMtmInversoComTabela, RelationConfigError, "must not have 'joinTable'"),
        (RelacaoErroJoinTableErrado, RelationConfigError, "only valid for many-to-many"),
        (RelacaoErroAlvoInvalido, RelationTargetError, "final type found was int (scalar)"),
        (RelacaoErroJoinColumnVazio, RelationConfigError, "empty joinColumn name"),
        (ErrRelMtoSemJoinColumn, RelationConfigError, "many-to-one relation requires 'joinColumn'"),
        (ErrRelOtmSemMappedBy, RelationConfigError, "one-to-many relation requires 'mappedBy'"),
        (
            ErrRelOtoInversoSemMappedBy,
            RelationConfigError,
            "inverse side of one-to-one relation requires 'mappedBy'",
        ),
    ])
    def test_invalid_relation(self, registry, model, error_type, fragment):
        with pytest.raises(EntityParseError) as exc_info:
            registry.parse(model)

        err = exc_info.value
        assert isinstance(err.cause, error_type)
        assert fragment in str(err)
        assert err.cause.entity == model.__name__
        assert model not in registry

    def test_invalid_relation_is_dropped(self):
        parser = EntityParser(RelacaoErroConflito)
        with pytest.raises(EntityParseError):
            parser.parse()
        assert parser.report.fields_with(FieldOutcome.DROPPED) == ["usuario"]

    def test_invalid_kind_is_not_a_relation(self):
        parser = EntityParser(RelacaoErroTipo)
        with pytest.raises(EntityParseError):
            parser.parse()
        # demoted to a column candidate, then skipped as a record-typed field
        assert parser.report.fields_with(FieldOutcome.SKIPPED) == ["usuario"]

    def test_empty_join_column_reported_first(self, registry):
        with pytest.raises(EntityParseError) as exc_info:
            registry.parse(RelacaoErroJoinColumnVazio)

        messages = [str(e) for e in exc_info.value.errors]
        assert len(messages) == 2
        assert "empty joinColumn name" in messages[0]
        assert "requires 'joinColumn'" in messages[1]


class TestParseJoinColumn:

    def test_default_reference(self):
        jc = parse_join_column("autor_id")
        assert jc.column_name == "autor_id"
        assert jc.referenced_column_name == "id"

    def test_explicit_reference(self):
        jc = parse_join_column(" autor_id : codigo ")
        assert jc.column_name == "autor_id"
        assert jc.referenced_column_name == "codigo"
