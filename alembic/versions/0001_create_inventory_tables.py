"""Create people, permission, product and storage tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_create_inventory_tables"
down_revision = None
branch_labels = None
depends_on = None


def _lookup_table(name: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column(f"{name}_id", sa.Integer(), primary_key=True),
        sa.Column(f"{name}_label", sa.String(), nullable=False),
        *extra,
    )


def upgrade() -> None:
    op.create_table(
        "person",
        sa.Column("person_id", sa.Integer(), primary_key=True),
        sa.Column("person_email", sa.String(), nullable=False, unique=True),
    )
    op.create_index("ix_person_person_email", "person", ["person_email"])

    op.create_table(
        "entity",
        sa.Column("entity_id", sa.Integer(), primary_key=True),
        sa.Column("entity_name", sa.String(), nullable=False, unique=True),
        sa.Column("entity_description", sa.String(), nullable=True),
    )
    op.create_index("ix_entity_entity_name", "entity", ["entity_name"])

    op.create_table(
        "entitypeople",
        sa.Column("entitypeople_entity_id", sa.Integer(), sa.ForeignKey("entity.entity_id"), primary_key=True),
        sa.Column("entitypeople_person_id", sa.Integer(), sa.ForeignKey("person.person_id"), primary_key=True),
    )
    op.create_table(
        "personentities",
        sa.Column("personentities_person_id", sa.Integer(), sa.ForeignKey("person.person_id"), primary_key=True),
        sa.Column("personentities_entity_id", sa.Integer(), sa.ForeignKey("entity.entity_id"), primary_key=True),
    )

    op.create_table(
        "permission",
        sa.Column("permission_id", sa.Integer(), primary_key=True),
        sa.Column("person", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=False),
        sa.Column("permission_perm_name", sa.String(), nullable=False),
        sa.Column("permission_item_name", sa.String(), nullable=False),
        sa.Column("permission_entity_id", sa.Integer(), nullable=False, server_default=sa.text("-1")),
    )
    op.create_index("ix_permission_person_entity", "permission", ["person", "permission_entity_id"])

    for name in ("casnumber", "cenumber", "name", "empiricalformula", "classofcompound"):
        _lookup_table(name)
        op.create_index(f"ix_{name}_{name}_label", name, [f"{name}_label"])
    _lookup_table("physicalstate")
    _lookup_table("signalword")
    _lookup_table("symbol", sa.Column("symbol_image", sa.String(), nullable=True))
    _lookup_table("hazardstatement", sa.Column("hazardstatement_reference", sa.String(), nullable=False))
    _lookup_table(
        "precautionarystatement",
        sa.Column("precautionarystatement_reference", sa.String(), nullable=False),
    )

    op.create_table(
        "product",
        sa.Column("product_id", sa.Integer(), primary_key=True),
        sa.Column("product_specificity", sa.String(), nullable=True),
        sa.Column("product_msds", sa.String(), nullable=True),
        sa.Column("product_restricted", sa.Boolean(), nullable=True),
        sa.Column("product_radioactive", sa.Boolean(), nullable=True),
        sa.Column("product_linearformula", sa.String(), nullable=True),
        sa.Column("product_threedformula", sa.String(), nullable=True),
        sa.Column("product_disposalcomment", sa.String(), nullable=True),
        sa.Column("product_remark", sa.String(), nullable=True),
        sa.Column("casnumber", sa.Integer(), sa.ForeignKey("casnumber.casnumber_id"), nullable=False),
        sa.Column("cenumber", sa.Integer(), sa.ForeignKey("cenumber.cenumber_id"), nullable=True),
        sa.Column("name", sa.Integer(), sa.ForeignKey("name.name_id"), nullable=False),
        sa.Column(
            "empiricalformula",
            sa.Integer(),
            sa.ForeignKey("empiricalformula.empiricalformula_id"),
            nullable=False,
        ),
        sa.Column("physicalstate", sa.Integer(), sa.ForeignKey("physicalstate.physicalstate_id"), nullable=True),
        sa.Column("signalword", sa.Integer(), sa.ForeignKey("signalword.signalword_id"), nullable=True),
        sa.Column(
            "classofcompound",
            sa.Integer(),
            sa.ForeignKey("classofcompound.classofcompound_id"),
            nullable=True,
        ),
        sa.Column("person", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=False),
    )
    op.create_index("ix_product_name", "product", ["name"])

    for table, target, target_column in (
        ("productsymbols", "symbol", "symbol_id"),
        ("productsynonyms", "name", "name_id"),
        ("producthazardstatements", "hazardstatement", "hazardstatement_id"),
        ("productprecautionarystatements", "precautionarystatement", "precautionarystatement_id"),
    ):
        op.create_table(
            table,
            sa.Column(f"{table}_product_id", sa.Integer(), sa.ForeignKey("product.product_id"), primary_key=True),
            sa.Column(
                f"{table}_{target_column}",
                sa.Integer(),
                sa.ForeignKey(f"{target}.{target_column}"),
                primary_key=True,
            ),
        )

    op.create_table(
        "bookmark",
        sa.Column("bookmark_id", sa.Integer(), primary_key=True),
        sa.Column("person", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=False),
        sa.Column("product", sa.Integer(), sa.ForeignKey("product.product_id"), nullable=False),
        sa.UniqueConstraint("person", "product", name="uq_bookmark_person_product"),
    )

    op.create_table(
        "storelocation",
        sa.Column("storelocation_id", sa.Integer(), primary_key=True),
        sa.Column("storelocation_name", sa.String(), nullable=False),
        sa.Column("entity", sa.Integer(), sa.ForeignKey("entity.entity_id"), nullable=False),
    )
    op.create_table(
        "unit",
        sa.Column("unit_id", sa.Integer(), primary_key=True),
        sa.Column("unit_label", sa.String(), nullable=False),
    )
    op.create_table(
        "storage",
        sa.Column("storage_id", sa.Integer(), primary_key=True),
        sa.Column("product", sa.Integer(), sa.ForeignKey("product.product_id"), nullable=False),
        sa.Column("storelocation", sa.Integer(), sa.ForeignKey("storelocation.storelocation_id"), nullable=False),
        sa.Column("unit", sa.Integer(), sa.ForeignKey("unit.unit_id"), nullable=False),
        sa.Column("storage_quantity", sa.Float(), nullable=False),
        sa.Column("storage_batchnumber", sa.String(), nullable=True),
        sa.Column("storage_entrydate", sa.DateTime(timezone=True), nullable=True),
        sa.Column("storage_exitdate", sa.DateTime(timezone=True), nullable=True),
        sa.Column("storage_openingdate", sa.DateTime(timezone=True), nullable=True),
        sa.Column("storage_expirationdate", sa.Date(), nullable=True),
        sa.Column("storage_comment", sa.String(), nullable=True),
        sa.Column("storage_borrowedby", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=True),
    )
    op.create_index("ix_storage_product_location_unit", "storage", ["product", "storelocation", "unit"])


def downgrade() -> None:
    op.drop_index("ix_storage_product_location_unit", table_name="storage")
    for table in (
        "storage",
        "unit",
        "storelocation",
        "bookmark",
        "productprecautionarystatements",
        "producthazardstatements",
        "productsynonyms",
        "productsymbols",
    ):
        op.drop_table(table)
    op.drop_index("ix_product_name", table_name="product")
    op.drop_table("product")
    for name in ("precautionarystatement", "hazardstatement", "symbol", "signalword", "physicalstate"):
        op.drop_table(name)
    for name in ("classofcompound", "empiricalformula", "name", "cenumber", "casnumber"):
        op.drop_index(f"ix_{name}_{name}_label", table_name=name)
        op.drop_table(name)
    op.drop_index("ix_permission_person_entity", table_name="permission")
    op.drop_table("permission")
    op.drop_table("personentities")
    op.drop_table("entitypeople")
    op.drop_index("ix_entity_entity_name", table_name="entity")
    op.drop_table("entity")
    op.drop_index("ix_person_person_email", table_name="person")
    op.drop_table("person")
