# -*- coding: utf-8 -*-
"""
    pgconstrdiff.dbobject.schema
    ~~~~~~~~~~~~~~~~~~~~~~~~~~~~

    This defines two classes, Schema and SchemaDict, derived from
    DbObject and DbObjectDict, respectively.
"""
from . import DbObjectDict, DbObject


class Schema(DbObject):
    """A database schema definition, i.e., a named collection of tables
    and other schema objects."""

    keylist = ['name']
    catalog = 'pg_namespace'

    def __init__(self, name, description=None, oid=None):
        """Initialize the schema

        :param name: schema name (from nspname)
        :param description: comment text (from obj_description())
        """
        super(Schema, self).__init__(name, description)
        self.tables = {}
        self.oid = oid

    @staticmethod
    def query(dbversion=None):
        return r"""
            SELECT nspname AS name,
                   obj_description(n.oid, 'pg_namespace') AS description, n.oid
            FROM pg_namespace n
            WHERE nspname NOT IN ('information_schema', 'pg_toast',
                                  'pg_catalog')
                  AND nspname NOT LIKE 'pg_temp\_%'
                  AND nspname NOT LIKE 'pg_toast_temp\_%'
            AND n.oid NOT IN (
                  SELECT objid FROM pg_depend WHERE deptype = 'e'
                  AND classid = 'pg_namespace'::regclass)
            ORDER BY nspname"""

    @staticmethod
    def from_map(name, inobj):
        """Initialize a Schema instance from a YAML map

        :param name: schema name
        :param inobj: YAML map of the schema
        :return: Schema instance
        """
        return Schema(name, inobj.pop('description', None))

    def get_table(self, name):
        """Return the table with the given name, if any

        :param name: table name
        :return: table or None
        """
        return self.tables.get(name)


class SchemaDict(DbObjectDict):
    "The collection of schemas in a database"

    cls = Schema

    def from_map(self, inmap, newdb):
        """Initialize the dictionary of schemas by converting the input map

        :param inmap: the input YAML map defining the schemas
        :param newdb: collection of dictionaries defining the database

        Starts the recursive analysis of the input map and
        construction of the internal collection of dictionaries
        describing the database objects.
        """
        for key in inmap:
            (objtype, spc, sch) = key.partition(' ')
            if spc != ' ' or objtype != 'schema':
                raise KeyError("Unrecognized object type: %s" % key)
            inschema = dict(inmap[key] or {})
            schema = self[sch] = Schema.from_map(sch, inschema)
            newdb.tables.from_map(schema, inschema, newdb)

    def link_refs(self, dbtables):
        """Connect tables to their respective schemas

        :param dbtables: dictionary of tables
        """
        for (sch, tbl) in dbtables:
            if sch not in self:
                raise KeyError("Table '%s' in unknown schema '%s'" % (
                    tbl, sch))
            self[sch].tables.update({tbl: dbtables[(sch, tbl)]})
