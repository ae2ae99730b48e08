"""
Screen dispatch core

Screens resolve a request to one of their action methods, bind the
method's parameters, gate access declaratively and re-render single layout
nodes on demand.
"""

from screen.access import check_access, normalize_permission
from screen.actions import Action, Button, DropDown, Link
from screen.base import Screen, plan_get_dispatch
from screen.binder import ParameterBinder, ParameterDescriptor, Param, action
from screen.layouts import Blank, Columns, Layout, Legend, Rows, TD, Table

__all__ = [
    'Screen',
    'plan_get_dispatch',
    'check_access',
    'normalize_permission',
    'ParameterBinder',
    'ParameterDescriptor',
    'Param',
    'action',
    'Action',
    'Button',
    'DropDown',
    'Link',
    'Layout',
    'Blank',
    'Rows',
    'Columns',
    'Table',
    'Legend',
    'TD',
]
