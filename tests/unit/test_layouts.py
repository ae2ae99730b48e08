"""
Layout tree and command bar tests
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from auth_service import Principal
from container import DIContainer
from models import Repository
from screen import Blank, Button, Columns, DropDown, Legend, Link, Rows, TD, Table
from screen.actions import Commander
from screen.layouts import find_by_slug, resolve_layouts, slugify


class OrdersTable(Table):
    target = 'orders'

    def columns(self):
        return [
            TD('id', 'ID'),
            TD('customer.name', 'Customer'),
            TD('total', render=lambda row: f"{row['total']:.2f}"),
        ]


class Chart:
    """Not a layout"""


@pytest.mark.parametrize("name,slug", [
    ('UsersTable', 'users-table'),
    ('HTMLLegend', 'html-legend'),
    ('Rows', 'rows'),
    ('Profile2Layout', 'profile2-layout'),
])
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_explicit_slug_overrides_class_name():
    assert OrdersTable().slug == 'orders-table'
    assert OrdersTable(slug='recent').slug == 'recent'


def test_table_rendering(make_context):
    repository = Repository({'orders': [
        {'id': 1, 'customer': {'name': 'Ann'}, 'total': 3},
        {'id': 2, 'customer': {'name': 'Ben'}, 'total': 4.5},
    ]})

    payload = OrdersTable(title='Orders').render(repository, make_context())

    assert payload['type'] == 'table'
    assert payload['title'] == 'Orders'
    assert payload['columns'][1] == {'name': 'customer.name', 'title': 'Customer'}
    assert payload['rows'] == [
        {'id': 1, 'customer.name': 'Ann', 'total': '3.00'},
        {'id': 2, 'customer.name': 'Ben', 'total': '4.50'},
    ]
    assert 'async' not in payload


def test_async_marker(make_context):
    table = OrdersTable().asynchronous('async_orders')
    payload = table.render(Repository({}), make_context())

    assert payload['async'] == {'method': 'async_orders', 'slug': 'orders-table'}
    assert payload['rows'] == []


def test_legend_reads_object_attributes(make_context):
    class Person:
        name = 'Ann'

    legend = Legend(target='person')
    legend.fields = lambda: [TD('name')]

    payload = legend.render(Repository({'person': Person()}), make_context())

    assert payload['fields'] == [{'name': 'name', 'title': 'Name', 'value': 'Ann'}]


def test_permission_hides_children(make_context):
    tree = Rows(Blank(slug='public'), Blank(slug='private', permission='platform.secret'))
    insider = Principal('9', 'insider', frozenset({'platform.secret'}))

    anonymous_view = tree.render(Repository(), make_context())
    insider_view = tree.render(Repository(), make_context(principal=insider))

    assert [child['slug'] for child in anonymous_view['children']] == ['public']
    assert [child['slug'] for child in insider_view['children']] == ['public', 'private']


def test_find_by_slug_is_depth_first():
    inner = Blank(slug='target', title='inner')
    outer_late = Blank(slug='target', title='late')
    tree = [Rows(Columns(inner)), outer_late]

    assert find_by_slug(tree, 'target') is inner
    assert find_by_slug(tree, 'absent') is None


@pytest.mark.asyncio
async def test_resolve_layouts_does_not_touch_declaration():
    declared = Rows(OrdersTable, Columns(OrdersTable(slug='second')))

    resolved = await resolve_layouts([declared], DIContainer())

    assert declared.children[0] is OrdersTable
    assert resolved[0] is not declared
    assert isinstance(resolved[0].children[0], OrdersTable)
    assert resolved[0].children[1].children[0].slug == 'second'


@pytest.mark.asyncio
async def test_resolve_layouts_builds_fresh_nodes_every_pass():
    declared = [OrdersTable]
    container = DIContainer()

    first = await resolve_layouts(declared, container)
    second = await resolve_layouts(declared, container)

    assert first[0] is not second[0]


@pytest.mark.asyncio
async def test_resolve_layouts_rejects_foreign_items():
    with pytest.raises(TypeError):
        await resolve_layouts([Chart], DIContainer())

    with pytest.raises(TypeError):
        await resolve_layouts(['rows'], DIContainer())


class Toolbar(Commander):
    def command_bar(self):
        return [
            Link('Back', href='/back', icon='arrow-left'),
            Button('Publish', method='publish', can_see=lambda repository: not repository.get('published')),
            DropDown('More', actions=[
                Button('Delete', method='delete', confirm='Sure?', permission='platform.delete'),
                Button('Copy', method='copy'),
            ]),
            Button('Hidden', method='hidden', can_see=False),
        ]


def test_command_bar_visibility(make_context):
    built = Toolbar().build_command_bar(Repository({'published': True}), make_context())

    assert [item['name'] for item in built] == ['Back', 'More']
    assert built[0] == {'type': 'link', 'name': 'Back', 'icon': 'arrow-left', 'href': '/back'}
    assert [item['name'] for item in built[1]['list']] == ['Copy']


def test_command_bar_with_permissions(make_context):
    principal = Principal('1', 'editor', frozenset({'platform.delete'}))

    built = Toolbar().build_command_bar(Repository({}), make_context(principal=principal))

    assert [item['name'] for item in built] == ['Back', 'Publish', 'More']
    assert built[2]['list'][0] == {
        'type': 'button', 'name': 'Delete', 'icon': None, 'method': 'delete', 'confirm': 'Sure?'
    }


def test_command_bar_without_context():
    built = Toolbar().build_command_bar(Repository({}))

    assert [item['name'] for item in built[2]['list']] == ['Copy']


def test_base_commander_requires_command_bar():
    with pytest.raises(NotImplementedError):
        Commander().build_command_bar(Repository({}))
