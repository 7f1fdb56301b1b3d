# tests/test_seed.py

from io import StringIO

import pytest
from django.core.management import call_command

from apps.board.models import Column, Ticket
from apps.core.models import Project, User

pytestmark = pytest.mark.django_db


def run_seed(**options):
    out = StringIO()
    call_command('seed', stdout=out, **options)
    return out.getvalue()


def test_seed_creates_demo_board():
    output = run_seed()

    user = User.objects.get(username='demo')
    assert user.check_password('demo12345')

    project = Project.objects.get(owner=user, name='Projeto Demo')
    assert Column.objects.filter(project=project).count() == 3
    assert Ticket.objects.filter(project=project).count() == 4
    assert project.tasks.filter(is_ticket=True).count() == 4
    assert 'Projeto Demo criado' in output


def test_seed_is_idempotent():
    run_seed()
    output = run_seed()

    assert Project.objects.filter(name='Projeto Demo').count() == 1
    assert Ticket.objects.count() == 4
    assert 'já existe' in output


def test_seed_with_custom_user():
    run_seed(username='maria', password='segredo123')

    assert User.objects.get(username='maria').check_password('segredo123')
