# -*- coding: utf-8 -*-
"""Utility functions and classes for testing pgconstrdiff"""

from collections import namedtuple
from unittest import TestCase

from pgconstrdiff.config import Config
from pgconstrdiff.database import Database


Options = namedtuple('Options', ['schemas', 'revert'])


def fix_indent(stmt):
    "Fix specifications which are in a new line with indentation"
    return stmt.replace('   ', ' ').replace('  ', ' ').replace('\n ', ' '). \
        replace('( ', '(')


def make_config(schemas=None, revert=False):
    """Return a configuration suitable for a Database without connection

    :param schemas: list of schemas to process
    :param revert: swap the old and new databases
    :return: Config
    """
    cfg = Config(sys_only=True)
    cfg['database'] = {'dbname': 'pgconstrdiff_testdb', 'host': None,
                       'username': None, 'password': None, 'port': None}
    cfg['options'] = Options(schemas or [], revert)
    return cfg


class CatalogStub(object):
    """A stand-in for a catalog connection returning canned rows

    Each argument is a list of dictionaries, as returned by the
    catalog query of the corresponding class.
    """

    version = 160000

    def __init__(self, schemas=(), tables=(), checks=(), primary_keys=(),
                 foreign_keys=(), uniques=(), reserved=()):
        self.dbname = 'pgconstrdiff_testdb'
        self.rows = [("contype = 'c'", checks),
                     ("contype = 'p'", primary_keys),
                     ("contype = 'f'", foreign_keys),
                     ("contype = 'u'", uniques),
                     ("pg_get_keywords", [{'word': w} for w in reserved]),
                     ("relkind", tables),
                     ("FROM pg_namespace n", schemas)]
        self.queries = []

    def fetchall(self, query, args=None):
        self.queries.append(query)
        for (marker, rows) in self.rows:
            if marker in query:
                return [dict(row) for row in rows]
        raise AssertionError("Unexpected catalog query: %s" % query)

    def rollback(self):
        pass

    def close(self):
        pass


class InputMapToSqlTestCase(TestCase):
    """Base class for "diff" test cases comparing two input maps"""

    def std_map(self):
        "Return a standard schema map for the test schema"
        return {'schema sd': {}}

    def to_sql(self, inmap, oldmap=None, schemas=None, revert=False,
               config=None):
        """Generate SQL to transform `oldmap` into `inmap`

        :param inmap: YAML map of the new database
        :param oldmap: YAML map of the original database (default empty)
        :param config: extra configuration to merge
        :return: list of SQL statements
        """
        cfg = make_config(schemas, revert)
        if config:
            cfg.merge(config)
        db = Database(cfg)
        return db.diff_two_map(oldmap or {}, inmap)
