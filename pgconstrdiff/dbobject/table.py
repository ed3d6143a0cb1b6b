# -*- coding: utf-8 -*-
"""
    pgconstrdiff.dbobject.table
    ~~~~~~~~~~~~~~~~~~~~~~~~~~~

    This module defines two classes: Table derived from
    DbSchemaObject and ClassDict derived from DbObjectDict.
"""
from . import DbObjectDict, DbSchemaObject


OBJTYPES = ['table', 'sequence', 'view', 'materialized view']


class Table(DbSchemaObject):
    """A database table definition

    Only the constraints of a table are kept, keyed by name in the
    order they were loaded.  Columns and other table attributes are
    accepted in input maps but ignored.
    """

    keylist = ['schema', 'name']
    catalog = 'pg_class'

    def __init__(self, name, schema, description=None, oid=None):
        """Initialize the table

        :param name: table name (from relname)
        :param schema: schema name (from relnamespace)
        :param description: comment text (from obj_description())
        """
        super(Table, self).__init__(name, schema, description)
        self.constraints = {}
        self.oid = oid

    @staticmethod
    def query(dbversion=None):
        return r"""
            SELECT c.relname AS name, nspname AS schema,
                   obj_description(c.oid, 'pg_class') AS description, c.oid
            FROM pg_class c
                 JOIN pg_namespace ON (relnamespace = pg_namespace.oid)
            WHERE relkind in ('r', 'p')
                  AND nspname != 'pg_catalog'
                  AND nspname != 'information_schema'
                  AND nspname NOT LIKE 'pg_temp\_%'
                  AND nspname NOT LIKE 'pg_toast_temp\_%'
              AND c.oid NOT IN (
                  SELECT objid FROM pg_depend WHERE deptype = 'e'
                  AND classid = 'pg_class'::regclass)
            ORDER BY nspname, relname"""

    @staticmethod
    def from_map(name, schema, inobj):
        """Initialize a table instance from a YAML map

        :param name: table name
        :param schema: schema the table belongs to
        :param inobj: YAML map of the table
        :return: table instance
        """
        return Table(name, schema.name, inobj.get('description'))

    def get_constraint(self, name):
        """Return the constraint with the given name, if any

        :param name: constraint name
        :return: constraint or None
        """
        return self.constraints.get(name)

    def contains_constraint(self, name):
        return name in self.constraints


class ClassDict(DbObjectDict):
    "The collection of tables in a database"

    cls = Table

    def from_map(self, schema, inobjs, newdb):
        """Initialize the dictionary of tables by converting the input map

        :param schema: schema owning the tables
        :param inobjs: YAML map defining the schema objects
        :param newdb: collection of dictionaries defining the database

        Only tables carry constraints; other relations are recognized
        and skipped.
        """
        for k in inobjs:
            inobj = inobjs[k] or {}
            objtype = None
            for typ in OBJTYPES:
                if k.startswith(typ + ' '):
                    objtype = typ
                    key = k[len(typ) + 1:]
            if objtype is None:
                raise KeyError("Unrecognized object type: %s" % k)
            if objtype != 'table':
                continue
            self[(schema.name, key)] = table = Table.from_map(
                key, schema, inobj)
            newdb.constraints.from_map(table, inobj)

    def link_refs(self, dbconstrs):
        """Connect constraints to their respective tables

        :param dbconstrs: dictionary of constraints

        Fills the `constraints` dictionary of each table by traversing
        `dbconstrs`, which is keyed by schema, table and constraint
        name.
        """
        for (sch, tbl, cns) in dbconstrs:
            if (sch, tbl) not in self:
                raise KeyError("Constraint '%s' on unknown table '%s.%s'" % (
                    cns, sch, tbl))
            constr = dbconstrs[(sch, tbl, cns)]
            table = self[(sch, tbl)]
            table.constraints.update({cns: constr})
