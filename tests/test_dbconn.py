# -*- coding: utf-8 -*-
"""Test connection parameters"""

from pgconstrdiff.database import CatDbConnection


def test_params_omit_unset():
    "Only the given parameters are passed when connecting"
    dbconn = CatDbConnection('testdb', host='localhost', port=5433)
    assert dbconn.params == {'dbname': 'testdb', 'host': 'localhost',
                             'port': 5433}
    assert dbconn.conn is None


def test_close_disconnected():
    "Closing a connection never opened is harmless"
    dbconn = CatDbConnection('testdb', 'alice', 'secret')
    assert dbconn.params['user'] == 'alice'
    assert dbconn.params['password'] == 'secret'
    dbconn.close()
    assert dbconn.conn is None
