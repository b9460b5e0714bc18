"""Functional tests.

Drive the ``roster`` CLI as a user would through click's CliRunner and check
exit codes and output only.
"""
