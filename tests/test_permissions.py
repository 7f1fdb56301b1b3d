# tests/test_permissions.py

import pytest
from django.contrib.auth.models import AnonymousUser

from apps.core.exceptions import Forbidden
from apps.core.models import ProjectContributor, User
from apps.core.permissions import OmniHubPermissions

pytestmark = pytest.mark.django_db


def test_owner_and_accepted_contributors_are_members(project, owner, editor, viewer, outsider):
    assert project.is_member(owner)
    assert project.is_member(editor)
    assert project.is_member(viewer)
    assert not project.is_member(outsider)
    assert not project.is_member(AnonymousUser())


def test_pending_or_ignored_invites_give_no_access(project):
    pending = User.objects.create_user(username='p', password='x')
    ignored = User.objects.create_user(username='i', password='x')
    ProjectContributor.objects.create(project=project, user=pending)
    ProjectContributor.objects.create(
        project=project, user=ignored, status=ProjectContributor.STATUS_IGNORED
    )

    assert not OmniHubPermissions.tem_acesso_projeto(pending, project)
    assert not OmniHubPermissions.tem_acesso_projeto(ignored, project)


def test_only_owner_admin_and_editor_can_edit(project, owner, editor, viewer, outsider):
    admin = User.objects.create_user(username='adm', password='x')
    ProjectContributor.objects.create(
        project=project, user=admin, role='Admin',
        status=ProjectContributor.STATUS_ACCEPTED,
    )

    assert OmniHubPermissions.pode_editar_board(owner, project)
    assert OmniHubPermissions.pode_editar_board(admin, project)
    assert OmniHubPermissions.pode_editar_board(editor, project)
    assert not OmniHubPermissions.pode_editar_board(viewer, project)
    assert not OmniHubPermissions.pode_editar_board(outsider, project)


def test_garantir_acesso(project, viewer):
    OmniHubPermissions.garantir_acesso(viewer, project)

    with pytest.raises(Forbidden):
        OmniHubPermissions.garantir_acesso(viewer, project, editar=True)


def test_accessible_projects(project, other_project, editor, outsider):
    assert list(editor.get_accessible_projects()) == [project]
    assert list(outsider.get_accessible_projects()) == [other_project]
