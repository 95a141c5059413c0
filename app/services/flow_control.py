from dataclasses import dataclass
from typing import Any, Iterable, Optional

from app.models.project import ProjectRole


@dataclass(frozen=True)
class FlowDecision:
    allowed: bool
    reason: Optional[str] = None


ALLOWED = FlowDecision(allowed=True)


def _role_value(role: Any) -> str:
    return role.value if isinstance(role, ProjectRole) else str(role)


def _permits(required_roles: Optional[Iterable[Any]], role: str) -> bool:
    """Пустой набор ролей = без ограничений; иначе роль должна быть в наборе явно"""
    roles = {_role_value(r) for r in (required_roles or ())}
    return not roles or role in roles


def _is_same_list(source_list: Any, target_list: Any) -> bool:
    if source_list is target_list:
        return True
    source_id = getattr(source_list, "id", None)
    return source_id is not None and source_id == getattr(target_list, "id", None)


def decide(source_list: Any, target_list: Any, acting_role: Any) -> FlowDecision:
    """Можно ли переместить задачу из source_list в target_list с ролью acting_role.

    Списки - любые объекты с атрибутами required_role_to_leave, required_role_to_enter
    и name (модель TaskList или ее аналог). Сравнение ролей - по членству в наборе,
    без учета иерархии. Перемещение внутри одного списка разрешено всегда.
    Функция не бросает исключений.
    """
    if _is_same_list(source_list, target_list):
        return ALLOWED

    role = _role_value(acting_role)

    if not _permits(getattr(source_list, "required_role_to_leave", None), role):
        return FlowDecision(
            allowed=False,
            reason=f'cannot leave list "{getattr(source_list, "name", "")}"',
        )

    if not _permits(getattr(target_list, "required_role_to_enter", None), role):
        return FlowDecision(
            allowed=False,
            reason=f'cannot enter list "{getattr(target_list, "name", "")}"',
        )

    return ALLOWED
