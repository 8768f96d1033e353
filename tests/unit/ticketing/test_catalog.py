"""Tests for DocumentCatalog."""

from __future__ import annotations

import pytest

from ticketing.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ticketing.models import DocumentType, ItemRequest


class TestCatalog:
    def test_list_hides_inactive_by_default(self, engine, doc_types):
        names = {d.name for d in engine.catalog.list()}
        assert names == {"Barangay Clearance", "Certificate of Indigency"}
        assert len(engine.catalog.list(include_inactive=True)) == 3

    def test_create(self, engine, superadmin):
        created = engine.catalog.create(superadmin, DocumentType(name=" Business Permit ", price=15000))
        assert created.name == "Business Permit"
        assert engine.catalog.get(created.id).price == 15000

    @pytest.mark.parametrize("actor_name", ["staff", "admin"])
    def test_mutations_are_superadmin_only(self, engine, request, actor_name, doc_types):
        actor = request.getfixturevalue(actor_name)
        with pytest.raises(AuthorizationError):
            engine.catalog.create(actor, DocumentType(name="Permit", price=100))
        with pytest.raises(AuthorizationError):
            engine.catalog.set_active(actor, doc_types["clearance"].id, False)

    def test_negative_price_rejected(self, engine, superadmin, doc_types):
        with pytest.raises(ValidationError):
            engine.catalog.create(superadmin, DocumentType(name="Refund", price=-1))
        with pytest.raises(ValidationError):
            engine.catalog.update(superadmin, doc_types["clearance"].id, {"price": -100})

    def test_names_are_unique(self, engine, superadmin, doc_types):
        with pytest.raises(ConflictError):
            engine.catalog.create(superadmin, DocumentType(name="Barangay Clearance", price=1))
        with pytest.raises(ConflictError):
            engine.catalog.update(superadmin, doc_types["indigency"].id, {"name": "Barangay Clearance"})

    def test_update_fields(self, engine, superadmin, doc_types):
        changes = {"price": 7500, "requires_purpose": True}
        updated = engine.catalog.update(superadmin, doc_types["clearance"].id, changes)
        assert (updated.price, updated.requires_purpose) == (7500, True)

    def test_update_rejects_unknown_fields(self, engine, superadmin, doc_types):
        with pytest.raises(ValidationError):
            engine.catalog.update(superadmin, doc_types["clearance"].id, {"id": "other"})

    def test_reactivated_type_can_be_requested(self, engine, superadmin, person, doc_types):
        engine.catalog.set_active(superadmin, doc_types["cedula"].id, True)
        detail = engine.requests.create(person.id, [ItemRequest(doc_types["cedula"].id)])
        assert detail.request.total_price == 2000

    def test_price_change_does_not_reprice_existing_requests(self, engine, superadmin, person, doc_types):
        detail = engine.requests.create(person.id, [ItemRequest(doc_types["clearance"].id)])
        engine.catalog.update(superadmin, doc_types["clearance"].id, {"price": 9900})
        assert engine.requests.get_detail(detail.request.id).request.total_price == 5000

    def test_delete_unused(self, engine, superadmin, doc_types):
        engine.catalog.delete(superadmin, doc_types["cedula"].id)
        with pytest.raises(NotFoundError):
            engine.catalog.get(doc_types["cedula"].id)

    def test_delete_used_type_conflicts(self, engine, superadmin, person, doc_types):
        engine.requests.create(person.id, [ItemRequest(doc_types["clearance"].id)])
        with pytest.raises(ConflictError, match="deactivate"):
            engine.catalog.delete(superadmin, doc_types["clearance"].id)
