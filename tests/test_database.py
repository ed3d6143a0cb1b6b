# -*- coding: utf-8 -*-
"""Test comparing whole databases"""

import pytest

from pgconstrdiff import dbobject
from pgconstrdiff.database import Database
from pgconstrdiff.testutils import make_config, CatalogStub
from pgconstrdiff.testutils import InputMapToSqlTestCase

OLD_MAP = {'schema public': {'table orders': {
    'primary_key': {'pk_orders': {'columns': ['id']}},
    'check_constraints': {'chk_amount': {'columns': ['amount'],
                                         'expression': 'amount > 0'}}}}}

NEW_MAP = {'schema public': {'table orders': {
    'primary_key': {'pk_orders': {'columns': ['id']}},
    'check_constraints': {'chk_amount': {'columns': ['amount'],
                                         'expression': 'amount >= 0'}},
    'foreign_keys': {'fk_customer': {
        'columns': ['customer_id'],
        'references': {'table': 'customers', 'columns': ['id']}}}}}}


def orders_catalog():
    return CatalogStub(
        schemas=[{'name': 'public', 'description': None, 'oid': 2200}],
        tables=[{'name': 'orders', 'schema': 'public', 'description': None,
                 'oid': 16400}],
        checks=[{'name': 'chk_amount', 'schema': 'public', 'table': 'orders',
                 'columns': ['amount'], 'expression': '(amount > 0)',
                 'inherited': False, 'oid': 16410, 'description': None}],
        primary_keys=[{'name': 'pk_orders', 'schema': 'public',
                       'table': 'orders', 'columns': ['id'],
                       'deferrable': False, 'deferred': False,
                       'tablespace': None, 'inherited': False,
                       'oid': 16405, 'description': None}])


class DiffTwoMapTestCase(InputMapToSqlTestCase):
    """Test comparing two input maps"""

    def test_orders(self):
        "Change a check constraint and add a foreign key"
        assert self.to_sql(NEW_MAP, OLD_MAP) == [
            "ALTER TABLE public.orders DROP CONSTRAINT chk_amount",
            "ALTER TABLE public.orders ADD CONSTRAINT chk_amount "
            "CHECK (amount >= 0)",
            "ALTER TABLE public.orders ADD CONSTRAINT fk_customer "
            "FOREIGN KEY (customer_id) REFERENCES public.customers (id)"]

    def test_no_changes(self):
        assert self.to_sql(OLD_MAP, OLD_MAP) == []

    def test_revert(self):
        "Reverting generates the statements going back"
        assert self.to_sql(NEW_MAP, OLD_MAP, revert=True) == [
            "ALTER TABLE public.orders DROP CONSTRAINT chk_amount",
            "ALTER TABLE public.orders DROP CONSTRAINT fk_customer",
            "ALTER TABLE public.orders ADD CONSTRAINT chk_amount "
            "CHECK (amount > 0)"]

    def test_dropped_table_ignored(self):
        "Constraints of a table no longer present are not dropped"
        assert self.to_sql({'schema public': {}}, OLD_MAP) == []

    def test_dropped_schema_ignored(self):
        assert self.to_sql({}, OLD_MAP) == []

    def test_selected_schemas(self):
        "Only the selected schemas are compared"
        inmap = {'schema s1': {'table t1': {'primary_key': {
            't1_pkey': {'columns': ['c1']}}}},
            'schema s2': {'table t2': {'primary_key': {
                't2_pkey': {'columns': ['c2']}}}}}
        assert self.to_sql(inmap, schemas=['s2']) == [
            "ALTER TABLE s2.t2 ADD CONSTRAINT t2_pkey PRIMARY KEY (c2)"]

    def test_class_order(self):
        "Configuring the class order puts other constraints first"
        inmap = {'schema public': {'table t1': {
            'primary_key': {'t1_pkey': {'columns': ['c1']}},
            'unique_constraints': {'t1_c2_key': {'columns': ['c2']}}}}}
        sql = self.to_sql(inmap, config={
            'diff': {'classes': ['other', 'primary_key']}})
        assert sql == [
            "ALTER TABLE public.t1 ADD CONSTRAINT t1_c2_key UNIQUE (c2)",
            "ALTER TABLE public.t1 ADD CONSTRAINT t1_pkey PRIMARY KEY (c1)"]

    def test_bad_class_name(self):
        with pytest.raises(ValueError):
            self.to_sql(OLD_MAP, config={'diff': {'classes': ['checks']}})


def test_diff_map_catalog():
    "Compare the catalogs to an input map"
    db = Database(make_config())
    db.dbconn = stub = orders_catalog()
    stmts = db.diff_map(NEW_MAP)
    assert stmts == [
        "ALTER TABLE public.orders DROP CONSTRAINT chk_amount",
        "ALTER TABLE public.orders ADD CONSTRAINT chk_amount "
        "CHECK (amount >= 0)",
        "ALTER TABLE public.orders ADD CONSTRAINT fk_customer "
        "FOREIGN KEY (customer_id) REFERENCES public.customers (id)"]
    assert any('pg_get_keywords' in query for query in stub.queries)


def test_diff_map_catalog_unchanged():
    "Catalog expressions in parentheses match the input map"
    db = Database(make_config())
    db.dbconn = orders_catalog()
    assert db.diff_map(OLD_MAP, quote_reserved=False) == []


def test_diff_map_new_schema():
    "A schema missing from the catalogs gets all its constraints"
    db = Database(make_config())
    db.dbconn = orders_catalog()
    inmap = dict(OLD_MAP)
    inmap.update({'schema sales': {'table t1': {
        'primary_key': {'t1_pkey': {'columns': ['c1']}},
        'check_constraints': {'t1_c2_check': {'expression': 'c2 < 10'}}}}})
    assert db.diff_map(inmap, quote_reserved=False) == [
        "ALTER TABLE sales.t1 ADD CONSTRAINT t1_pkey PRIMARY KEY (c1)",
        "ALTER TABLE sales.t1 ADD CONSTRAINT t1_c2_check CHECK (c2 < 10)"]


def test_server_reserved_words(monkeypatch):
    "Reserved words fetched from the server replace the built-in list"
    monkeypatch.setattr(dbobject, 'RESERVED_WORDS', dbobject.RESERVED_WORDS)
    db = Database(make_config())
    db.dbconn = orders_catalog()
    db.dbconn.rows.insert(0, ("pg_get_keywords", [{'word': 'amount'}]))
    db.diff_map(NEW_MAP)
    assert dbobject.quote_id('amount') == '"amount"'
    assert dbobject.quote_id('user') == 'user'
