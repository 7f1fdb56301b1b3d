# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.board.realtime import RoomBroadcaster
from apps.board.services import BoardStore
from apps.core.models import Project, Task, User


class Command(BaseCommand):
    help = 'Cria um projeto de demonstração com board, tasks e tickets'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='demo')
        parser.add_argument('--password', default='demo12345')

    def handle(self, *args, **options):
        """
        Popula o banco com um board pronto para testar o drag-and-drop
        Idempotente: não duplica se o projeto demo já existir
        """
        self.stdout.write('🌱 Criando dados de demonstração...')

        user, criado = User.objects.get_or_create(
            username=options['username'],
            defaults={'email': f"{options['username']}@omnihub.app"}
        )
        if criado:
            user.set_password(options['password'])
            user.save()
            self.stdout.write(f'  👤 Usuário criado: {user.username}')

        if Project.objects.filter(owner=user, name='Projeto Demo').exists():
            self.stdout.write(self.style.WARNING('⚠️  Projeto Demo já existe - nada a fazer'))
            return

        # Eventos em tempo real não fazem sentido aqui (ninguém conectado)
        store = BoardStore(broadcaster=_SilentBroadcaster())

        with transaction.atomic():
            project = Project.objects.create(
                name='Projeto Demo',
                description='Board de exemplo criado pelo comando seed',
                owner=user,
            )

            heading = Task.objects.create(
                project=project, title='Lançamento', type=Task.TYPE_HEADING
            )
            tasks = [
                Task.objects.create(project=project, title=titulo, parent_task=heading,
                                    assigned_to=user, priority=prioridade)
                for titulo, prioridade in [
                    ('Definir escopo', 'High'),
                    ('Criar wireframes', 'Medium'),
                    ('Implementar API', 'Critical'),
                    ('Escrever documentação', 'Low'),
                ]
            ]
            Task.objects.create(project=project, title='Revisar contrato', status=Task.STATUS_DONE)

            columns = store.ensure_default_columns(project.pk)
            for index, task in enumerate(tasks):
                column = columns[min(index, len(columns) - 1)]
                store.create_ticket(task.pk, project.pk, column.pk)

        self.stdout.write(
            self.style.SUCCESS(
                f'✅ Projeto Demo criado (id={project.pk}) com '
                f'{len(columns)} colunas e {len(tasks)} tickets'
            )
        )


class _SilentBroadcaster(RoomBroadcaster):
    def emit_to_room(self, room_id, event, payload):
        pass
