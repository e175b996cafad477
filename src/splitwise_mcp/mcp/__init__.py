"""MCP server exposing the Splitwise API to AI assistants.

This package provides a Model Context Protocol (MCP) server with tools for
users, groups, friends and expenses, plus reference-data resources and
prompt templates. It runs over stdio by default, or over HTTP.
"""
