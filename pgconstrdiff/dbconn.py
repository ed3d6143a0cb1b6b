# -*- coding: utf-8 -*-
"""
    pgconstrdiff.dbconn
    ~~~~~~~~~~~~~~~~~~~

    A `DbConnection` holds the parameters needed to reach a PostgreSQL
    database and connects on the first catalog query.
"""
import sys

import psycopg
from psycopg.rows import dict_row


class DbConnection(object):
    """A database connection, possibly disconnected"""

    def __init__(self, dbname, user=None, pswd=None, host=None, port=None):
        """Keep the connection parameters, without connecting

        :param dbname: database name
        :param user: user name
        :param pswd: user password
        :param host: host name
        :param port: host port number
        """
        self.dbname = dbname
        self.params = dict((key, val) for (key, val) in (
            ('dbname', dbname), ('user', user), ('password', pswd),
            ('host', host), ('port', port)) if val is not None)
        self.conn = None

    def connect(self):
        """Connect to the database, exiting if the server refuses"""
        try:
            self.conn = psycopg.connect(row_factory=dict_row, **self.params)
        except psycopg.OperationalError as exc:
            msg = str(exc)
            if 'FATAL:' in msg:
                sys.exit("Database connection error: %s" %
                         msg[msg.index('FATAL:') + 7:])
            raise

    def close(self):
        if self.conn is not None and not self.conn.closed:
            self.conn.close()
        self.conn = None

    def rollback(self):
        self.conn.rollback()

    def fetchall(self, query, args=None):
        """Execute a SELECT query and return its rows

        :param query: a SELECT query to be executed
        :param args: arguments to query
        :return: a list of dictionary rows

        The transaction is rolled back if the query fails.
        """
        if self.conn is None or self.conn.closed:
            self.connect()
        try:
            with self.conn.cursor() as curs:
                curs.execute(query, args)
                return curs.fetchall()
        except psycopg.Error:
            self.conn.rollback()
            raise
