# tests/conftest.py
"""
Fixtures compartilhadas da suíte do OmniHub

- Usuários: dono, editor, viewer e um estranho ao projeto
- Projeto com colaboradores aceitos
- RecordingBroadcaster: guarda os eventos em vez de publicar no channel layer
- BoardStore ligado ao RecordingBroadcaster
- Clientes HTTP autenticados
"""

import pytest
from django.test import Client

from apps.board.realtime import RoomBroadcaster
from apps.board.services import BoardStore
from apps.core.models import Project, ProjectContributor, Task, User
from apps.core.services import TaskService


class RecordingBroadcaster(RoomBroadcaster):
    """Broadcaster de teste: acumula (sala, evento, payload)"""

    def __init__(self):
        self.sent = []

    def emit_to_room(self, room_id, event, payload):
        self.sent.append((room_id, event, payload))

    @property
    def events(self):
        return [event for _, event, _ in self.sent]

    def payloads(self, event):
        return [payload for _, name, payload in self.sent if name == event]

    def clear(self):
        self.sent = []


# ============== Usuários e projeto ==============

@pytest.fixture
def owner(db):
    return User.objects.create_user(username='ana', password='senha123', avatar='https://cdn/ana.png')


@pytest.fixture
def editor(db):
    return User.objects.create_user(username='bruno', password='senha123')


@pytest.fixture
def viewer(db):
    return User.objects.create_user(username='carla', password='senha123')


@pytest.fixture
def outsider(db):
    return User.objects.create_user(username='davi', password='senha123')


@pytest.fixture
def project(owner, editor, viewer):
    project = Project.objects.create(name='Site novo', owner=owner)
    ProjectContributor.objects.create(
        project=project, user=editor, role='Editor',
        status=ProjectContributor.STATUS_ACCEPTED,
    )
    ProjectContributor.objects.create(
        project=project, user=viewer, role='Viewer',
        status=ProjectContributor.STATUS_ACCEPTED,
    )
    return project


@pytest.fixture
def other_project(outsider):
    return Project.objects.create(name='Outro projeto', owner=outsider)


@pytest.fixture
def make_task(project):
    def _make_task(title='Task', **kwargs):
        kwargs.setdefault('project', project)
        return Task.objects.create(title=title, **kwargs)
    return _make_task


# ============== Board ==============

@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def store(broadcaster):
    return BoardStore(broadcaster=broadcaster)


@pytest.fixture
def columns(store, project):
    """Start / In Progress / Closed"""
    return store.ensure_default_columns(project.pk)


@pytest.fixture
def make_ticket(store, project, make_task):
    def _make_ticket(column, title='Ticket', **kwargs):
        task = make_task(title, **kwargs)
        return store.create_ticket(task.pk, project.pk, column.pk)
    return _make_ticket


# ============== HTTP ==============

def _client_for(user):
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def owner_client(owner):
    return _client_for(owner)


@pytest.fixture
def viewer_client(viewer):
    return _client_for(viewer)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def board_broadcaster(monkeypatch, broadcaster):
    """Faz as views usarem o RecordingBroadcaster"""
    monkeypatch.setattr(
        'apps.board.views.get_board_store',
        lambda: BoardStore(broadcaster=broadcaster),
    )
    return broadcaster


@pytest.fixture
def task_service(broadcaster):
    return TaskService(broadcaster=broadcaster)


@pytest.fixture
def task_broadcaster(monkeypatch, broadcaster):
    """Faz as views de task usarem o RecordingBroadcaster"""
    monkeypatch.setattr(
        'apps.core.views.get_task_service',
        lambda: TaskService(broadcaster=broadcaster),
    )
    return broadcaster
