"""Membership System package.

This package is organized by feature modules (weeks, enrollment, attendance,
meetings, access) with a thin Flask controller layer and service/repository
layers around pure computation modules.
"""
