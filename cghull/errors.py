"""Винятки побудови опуклих оболонок."""
from __future__ import annotations
from typing import Optional


class HullError(Exception):
    """Базовий виняток cghull."""


class InvalidInputError(HullError, ValueError):
    """Вхід відхилено до початку обчислень (None, не та розмірність, nan/inf)."""


class ConvexityValidationError(HullError):
    """
    Перевірка результату не пройшла: оболонка не опукла або не замкнена.
    Зазвичай означає, що епсилон занадто грубий відносно розкиду точок.
    report: діагностика (для 3D: словник з validate()).
    """

    def __init__(self, message: str, report: Optional[dict] = None):
        super().__init__(message)
        self.report = report or {}
