# -*- coding: utf-8 -*-
"""Test loading of tables and their constraints"""

import pytest

from pgconstrdiff.database import Database
from pgconstrdiff.dbobject.constraint import CheckConstraint, PrimaryKey
from pgconstrdiff.dbobject.constraint import ForeignKey, UniqueConstraint
from pgconstrdiff.testutils import make_config, CatalogStub


def from_map(inmap):
    return Database(make_config()).from_map(inmap)


def test_constraint_load_order():
    "Constraints load as checks, primary key, foreign keys, uniques"
    dbdicts = from_map({'schema public': {'table orders': {
        'unique_constraints': {'uq_ref': {'columns': ['ref']}},
        'foreign_keys': {'fk_customer': {
            'columns': ['customer_id'],
            'references': {'table': 'customers', 'columns': ['id']}}},
        'primary_key': {'pk_orders': {'columns': ['id']}},
        'check_constraints': {'chk_b': {'expression': 'b > 0'},
                              'chk_a': {'expression': 'a > 0'}}}}})
    table = dbdicts.schemas['public'].get_table('orders')
    assert list(table.constraints.keys()) == [
        'chk_b', 'chk_a', 'pk_orders', 'fk_customer', 'uq_ref']
    assert isinstance(table.get_constraint('chk_a'), CheckConstraint)
    assert isinstance(table.get_constraint('pk_orders'), PrimaryKey)
    assert isinstance(table.get_constraint('fk_customer'), ForeignKey)
    assert isinstance(table.get_constraint('uq_ref'), UniqueConstraint)
    assert table.get_constraint('pk_orders').primary_key
    assert not table.get_constraint('uq_ref').primary_key
    assert table.get_constraint('missing') is None
    assert table.contains_constraint('uq_ref')
    assert dbdicts.constraints[('public', 'orders', 'uq_ref')] is \
        table.get_constraint('uq_ref')


def test_table_order():
    "Tables keep the order of the input map"
    dbdicts = from_map({'schema public': {
        'table zeta': {}, 'table alpha': None, 'view v1': {}}})
    assert list(dbdicts.schemas['public'].tables.keys()) == ['zeta', 'alpha']


def test_input_map_not_mutated():
    "Loading a map leaves the input map as it was"
    inmap = {'schema public': {'description': 'Standard schema',
                               'table t1': {}}}
    from_map(inmap)
    assert inmap == {'schema public': {'description': 'Standard schema',
                                       'table t1': {}}}


def test_bad_top_level_key():
    with pytest.raises(KeyError):
        from_map({'table t1': {}})


def test_bad_schema_object():
    with pytest.raises(KeyError):
        from_map({'schema public': {'tabel t1': {}}})


def test_foreign_key_qualified_reference():
    "A schema-qualified reference table is split"
    dbdicts = from_map({'schema s2': {'table t2': {'foreign_keys': {
        't2_fkey': {'columns': ['c21'],
                    'references': {'table': 's1.t1', 'columns': ['c11']}}}}}})
    fkey = dbdicts.constraints[('s2', 't2', 't2_fkey')]
    assert (fkey.ref_schema, fkey.ref_table) == ('s1', 't1')


def test_from_catalog():
    "Load schemas, tables and constraints from the catalogs"
    stub = CatalogStub(
        schemas=[{'name': 'public', 'description': None, 'oid': 2200}],
        tables=[{'name': 'customers', 'schema': 'public',
                 'description': None, 'oid': 16390},
                {'name': 'orders', 'schema': 'public',
                 'description': None, 'oid': 16400}],
        checks=[{'name': 'chk_amount', 'schema': 'public', 'table': 'orders',
                 'columns': ['amount'], 'expression': '(amount > 0)',
                 'inherited': False, 'oid': 16410, 'description': None}],
        primary_keys=[{'name': 'customers_pkey', 'schema': 'public',
                       'table': 'customers', 'columns': ['id'],
                       'deferrable': False, 'deferred': False,
                       'tablespace': None, 'inherited': False,
                       'oid': 16395, 'description': None},
                      {'name': 'pk_orders', 'schema': 'public',
                       'table': 'orders', 'columns': ['id'],
                       'deferrable': False, 'deferred': False,
                       'tablespace': None, 'inherited': False,
                       'oid': 16405, 'description': 'Order key'}],
        foreign_keys=[{'name': 'fk_customer', 'schema': 'public',
                       'table': 'orders', 'columns': ['customer_id'],
                       'deferrable': False, 'deferred': False,
                       'ref_schema': 'public', 'ref_table': 'customers',
                       'ref_cols': ['id'], 'on_update': 'a',
                       'on_delete': 'c', 'match': 's', 'inherited': False,
                       'oid': 16420, 'description': None}])
    db = Database(make_config())
    db.dbconn = stub
    db.from_catalog()
    orders = db.db.schemas['public'].get_table('orders')
    assert list(orders.constraints.keys()) == [
        'chk_amount', 'pk_orders', 'fk_customer']
    assert orders.get_constraint('pk_orders').description == 'Order key'
    fkey = orders.get_constraint('fk_customer')
    assert fkey.on_update is None
    assert fkey.on_delete == 'cascade'
    assert fkey.match == 'simple'
    assert db.db.constraints.by_oid[16420] is fkey
    assert list(db.db.schemas['public'].tables.keys()) == [
        'customers', 'orders']


def test_from_catalog_unknown_table():
    "A constraint on a table not fetched is reported"
    stub = CatalogStub(
        schemas=[{'name': 'public', 'description': None, 'oid': 2200}],
        uniques=[{'name': 'uq1', 'schema': 'public', 'table': 't1',
                  'columns': ['c1'], 'deferrable': False, 'deferred': False,
                  'tablespace': None, 'inherited': False, 'oid': 16405,
                  'description': None}])
    db = Database(make_config())
    db.dbconn = stub
    with pytest.raises(KeyError):
        db.from_catalog()
