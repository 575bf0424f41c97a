# tests/rhosocial/activerecord_fixtures_test/test_resolver.py
"""Dependency resolution: ordering, reuse, self references and cycles."""

import pytest

from rhosocial.activerecord_fixtures import (
    DatabaseError,
    FixtureReference,
    FixupKind,
    IntegrityError,
    UnknownFixture,
)
from fixture_models import Author, Book, Chapter, Chicken, City, Country, Egg, Employee, Owner, Pet, Profile, Tag


def test_plain_fixture_is_saved_once(loader, adapter):
    jane = loader.load("author__jane")

    assert isinstance(jane, Author)
    assert jane.name == "Jane Austen"
    assert jane.id is not None
    assert adapter.saves() == [('save', 'author', jane.id)]
    assert adapter.links() == []


def test_belongs_to_dependency_saved_first(loader, adapter):
    emma = loader.load("book__emma")

    jane = Author.find_one(emma.author_id)
    assert jane.name == "Jane Austen"
    saves = adapter.saves()
    assert saves.index(('save', 'author', jane.id)) < saves.index(('save', 'book', emma.id))
    assert emma.author().id == jane.id


def test_belongs_to_reuses_persisted_dependency(loader, adapter):
    jane = loader.load("author__jane")
    emma = loader.load("book__emma")

    assert emma.author_id == jane.id
    assert len(adapter.saves('author')) == 1
    assert Author.query().count() == 1


def test_resolving_twice_is_idempotent(loader, adapter):
    first = loader.load("book__emma")
    second = loader.load("book__emma")

    assert first.id == second.id
    assert len(adapter.saves('book')) == 1
    assert Book.query().count() == 1


def test_diamond_dependency_persisted_once(loader, adapter):
    emma, pride = loader.load("book__emma", "book__pride")

    assert emma.author_id == pride.author_id
    assert len(adapter.saves('author')) == 1
    assert Author.query().count() == 1


def test_shared_multi_target_persisted_once(loader):
    loader.load("book__emma", "book__moby")

    assert Tag.query().count() == 2
    classic = loader.get("tag__classic")
    for book in (loader.get("book__emma"), loader.get("book__moby")):
        assert classic.id in [t.id for t in book.tags()]


def test_self_reference_without_explicit_key(loader):
    boss = loader.load("employee__boss")

    boss.refresh()
    assert boss.manager_id == boss.id
    assert boss.manager().id == boss.id


def test_self_reference_with_explicit_key(loader, adapter):
    lead = loader.load("employee__lead")

    assert lead.id == 10
    assert Employee.find_one(10).manager_id == 10
    # The key was known up front, so no follow-up link was needed
    assert adapter.links() == []


def test_self_reference_through_has_many(loader, adapter):
    solo = loader.load("employee__solo")

    assert solo.manager_id == solo.id
    assert Employee.find_one(solo.id).manager_id == solo.id
    assert adapter.links() == [('link', 'reports', solo.id, solo.id)]
    assert len(adapter.saves('employee')) == 1


def test_transitive_belongs_to_chain(loader):
    bob = loader.load("employee__bob")

    alice = bob.manager()
    assert alice.name == "Alice"
    assert alice.manager().name == "The Boss"
    assert Employee.query().count() == 3


def test_belongs_to_cycle_is_fixed_up(loader):
    france = loader.load("country__france")

    paris = City.find_one(france.capital_id)
    assert paris.name == "Paris"
    # paris was saved first with no country, then repaired once france existed
    assert paris.country_id == france.id
    assert Country.query().count() == 1
    assert City.query().count() == 1


def test_cycle_entered_from_the_other_side(loader, adapter):
    paris = loader.load("city__paris")

    paris.refresh()
    france = paris.country()
    assert france.capital_id == paris.id
    saves = adapter.saves()
    # first save of the cycle member reached second, then the fixup re-save
    assert saves[0] == ('save', 'country', france.id)
    assert saves[1] == ('save', 'city', paris.id)
    assert saves[2] == ('save', 'country', france.id)


def test_fixup_writes_only_the_foreign_key(loader):
    paris = loader.load("city__paris")

    france = Country.find_one(paris.country_id)
    assert france.name == "France"
    assert france.capital_id == paris.id


def test_cycle_through_has_many_link_is_deferred(loader, adapter):
    moby = loader.load("book__moby")

    herman = moby.author()
    assert herman.name == "Herman Melville"
    assert [b.id for b in herman.favorite_books()] == [moby.id]
    link = ('link', 'favorite_books', herman.id, moby.id)
    assert link in adapter.events
    # the deferred link is only written once moby has been saved
    assert adapter.events.index(('save', 'book', moby.id)) < adapter.events.index(link)


def test_multi_valued_links_follow_owner_save(loader, adapter):
    moby = loader.load("book__moby")

    assert sorted(c.title for c in moby.chapters()) == ["Loomings", "The Carpet-Bag"]
    assert sorted(t.name for t in moby.tags()) == ["classic", "sea"]
    owner_saved = adapter.events.index(('save', 'book', moby.id))
    for event in adapter.links():
        if event[1] in ('chapters', 'tags'):
            assert adapter.events.index(event) > owner_saved


def test_has_one_link(loader):
    loader.load("author__herman")

    herman = loader.get("author__herman")
    profile = herman.profile()
    assert isinstance(profile, Profile)
    assert profile.bio == "Sailor and novelist"
    assert profile.author_id == herman.id


def test_has_many_back_reference_is_consistent(loader):
    loader.load("book__moby")

    for chapter in Chapter.find_all():
        assert chapter.book().title == "Moby Dick"


def test_not_null_cycle_fails_on_first_save(loader):
    with pytest.raises(IntegrityError) as excinfo:
        loader.load("chicken__henny")

    assert isinstance(excinfo.value, DatabaseError)
    assert Chicken.query().count() == 0
    assert Egg.query().count() == 0


def test_one_sided_not_null_cycle_loads_from_the_not_null_side(loader, adapter):
    rex = loader.load("pet__rex")

    ann = Owner.find_one(rex.owner_id)
    assert ann.name == "Ann"
    # ann was saved with no pet first, then repaired once rex existed
    assert ann.pet_id == rex.id
    assert adapter.saves() == [
        ('save', 'owner', ann.id),
        ('save', 'pet', rex.id),
        ('save', 'owner', ann.id),
    ]


def test_one_sided_not_null_cycle_fails_from_the_nullable_side(loader):
    # rex is reached while ann is on the loading stack, so rex is saved first without an owner
    with pytest.raises(IntegrityError):
        loader.load("owner__ann")

    assert Pet.query().count() == 0


def test_unknown_fixture_name(loader):
    with pytest.raises(UnknownFixture):
        loader.load("author__nobody")


def test_unknown_dependency_propagates(loader):
    loader.store.ensure_loaded("book")
    loader.store.add(FixtureReference("book", "orphan"), {"title": "Orphan", "author": "ghost"})

    with pytest.raises(UnknownFixture):
        loader.load("book__orphan")


def test_loading_stack_and_fixups_are_drained(loader):
    loading, pending = [], {}
    loader.resolver.resolve(FixtureReference("country", "france"), loading, pending)

    assert loading == []
    assert pending == {}


def test_fixup_records_are_explicit(loader):
    pending = {}
    loader.store.ensure_loaded("city")
    loader.store.ensure_loaded("country")
    france = FixtureReference("country", "france")
    paris = FixtureReference("city", "paris")

    # Pretend france is mid-resolution so paris sees a back edge
    loading = [france]
    record = loader.resolver.resolve(paris, loading, pending)

    assert loading == [france]
    assert record.country_id is None
    [fixup] = pending[france]
    assert fixup.kind is FixupKind.SET_ASSOCIATION
    assert fixup.owner == paris
    assert fixup.descriptor is City.country
