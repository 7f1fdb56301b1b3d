# apps/board/ordering.py

"""
Motor de ordenação do board

Calcula, sem tocar no banco, quais irmãos precisam ter a `order`
deslocada quando um item (ticket ou coluna) é movido dentro de um
container ou entre containers. Quem aplica o plano é o BoardStore,
sempre dentro de uma única transação.
"""

from collections import namedtuple
from typing import Dict, Hashable, Iterable, List, Optional

from apps.core.exceptions import ValidationError


# Foto da posição de um item: id, container (coluna/projeto) e ordem atual
Placement = namedtuple('Placement', ['id', 'container', 'order'])

# Nova ordem de um irmão afetado pelo movimento
OrderDelta = namedtuple('OrderDelta', ['id', 'new_order'])


class MovePlan:
    """Resultado de plan_move: deltas dos irmãos + destino do item movido"""

    def __init__(self, moved_id, source_container, target_container,
                 target_order: int, deltas: Optional[List[OrderDelta]] = None,
                 is_noop: bool = False):
        self.moved_id = moved_id
        self.source_container = source_container
        self.target_container = target_container
        self.target_order = target_order
        self.deltas = deltas or []
        self.is_noop = is_noop

    @property
    def is_cross_container(self) -> bool:
        return self.source_container != self.target_container

    @property
    def shifts_siblings(self) -> bool:
        """Indica se algum irmão mudou de ordem como efeito colateral"""
        return bool(self.deltas)

    def __repr__(self):
        return (
            f"MovePlan(moved={self.moved_id!r}, {self.source_container!r} -> "
            f"{self.target_container!r}@{self.target_order}, deltas={len(self.deltas)})"
        )


def coerce_order(value, field: str = 'newOrder') -> int:
    """
    Converte o índice recebido do cliente para int

    Aceita int ou float integral (JSON não distingue 2 de 2.0).
    Rejeita bool, string, None, valores fracionários e negativos.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"'{field}' deve ser um número inteiro")

    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"'{field}' deve ser um número inteiro")
        value = int(value)

    if value < 0:
        raise ValidationError(f"'{field}' não pode ser negativo")

    return value


def dense_orders(placements: Iterable[Placement]) -> Dict[Hashable, int]:
    """
    Retorna {id: posição} com posições 0..n-1

    A posição segue (order, id), então lacunas deixadas por remoções
    são fechadas sem alterar a sequência visual.
    """
    ranked = sorted(placements, key=lambda p: (p.order, p.id))
    return {p.id: index for index, p in enumerate(ranked)}


def plan_move(moved: Placement, target_container, target_order,
              siblings: Iterable[Placement]) -> MovePlan:
    """
    Planeja o movimento de `moved` para (target_container, target_order)

    `siblings` são os demais itens do container de origem e, em
    movimentos entre containers, do container de destino. Itens de
    outros containers são ignorados.

    Mesmo container:
      - descendo: irmãos em (origem, destino] recebem -1
      - subindo: irmãos em [destino, origem) recebem +1
    Entre containers:
      - origem: irmãos depois do item recebem -1
      - destino: irmãos em [destino, ...) recebem +1

    Levanta ValidationError para índice inválido antes de qualquer escrita.
    """
    target_order = coerce_order(target_order)

    source_items = [moved]
    target_items = []
    for sibling in siblings:
        if sibling.id == moved.id:
            continue
        if sibling.container == moved.container:
            source_items.append(sibling)
        elif sibling.container == target_container:
            target_items.append(sibling)

    source_positions = dense_orders(source_items)
    moved_order = source_positions[moved.id]

    # === MESMO CONTAINER ===
    if target_container == moved.container:
        upper = len(source_items) - 1
        if target_order > upper:
            raise ValidationError(
                f"Posição {target_order} fora do intervalo (máximo {upper})"
            )

        if target_order == moved_order:
            return MovePlan(moved.id, moved.container, target_container,
                            target_order, is_noop=True)

        new_positions = {}
        for item in source_items:
            if item.id == moved.id:
                continue
            position = source_positions[item.id]
            if moved_order < position <= target_order:
                position -= 1
            elif target_order <= position < moved_order:
                position += 1
            new_positions[item.id] = position

        deltas = _collect_deltas(source_items, new_positions)
        return MovePlan(moved.id, moved.container, target_container,
                        target_order, deltas)

    # === ENTRE CONTAINERS ===
    upper = len(target_items)
    if target_order > upper:
        raise ValidationError(
            f"Posição {target_order} fora do intervalo (máximo {upper})"
        )

    new_positions = {}
    for item in source_items:
        if item.id == moved.id:
            continue
        position = source_positions[item.id]
        if position > moved_order:
            position -= 1
        new_positions[item.id] = position

    target_positions = dense_orders(target_items)
    for item in target_items:
        position = target_positions[item.id]
        if position >= target_order:
            position += 1
        new_positions[item.id] = position

    deltas = _collect_deltas(source_items + target_items, new_positions)
    return MovePlan(moved.id, moved.container, target_container,
                    target_order, deltas)


def _collect_deltas(items, new_positions) -> List[OrderDelta]:
    """Só entram no plano os itens cuja ordem persistida realmente muda"""
    deltas = []
    for item in items:
        if item.id not in new_positions:
            continue
        if new_positions[item.id] != item.order:
            deltas.append(OrderDelta(item.id, new_positions[item.id]))
    return sorted(deltas, key=lambda d: d.new_order)
