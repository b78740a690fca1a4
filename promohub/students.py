"""An in-memory student registry and the HTTP API over it."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from typing import Any

from flask import Flask, jsonify, request


@dataclass
class Student:
    """A student record."""

    id: int = 0
    name: str = ""
    age: int = 0
    grade: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the record."""
        return asdict(self)


def _parse(data: Any) -> dict[str, Any]:
    """Pick the student fields out of decoded JSON; raises ValueError on bad data."""
    if not isinstance(data, Mapping):
        raise ValueError("student data must be an object")
    changes: dict[str, Any] = {}
    for key, value in data.items():
        name = str(key).casefold()
        if name not in ("name", "age", "grade") or value is None:
            continue
        expected = int if name == "age" else str
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ValueError(f"{name} must be {expected.__name__}, got {value!r}")
        changes[name] = value
    return changes


class StudentStore:
    """Thread-safe in-memory storage that numbers students from 1."""

    def __init__(self) -> None:
        self._students: dict[int, Student] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _find(self, student_id: int) -> Student:
        try:
            return self._students[student_id]
        except KeyError:
            raise KeyError(f"student {student_id} not found") from None

    def list(self) -> list[Student]:
        """Return every student in the order they were created."""
        with self._lock:
            return list(self._students.values())

    def get(self, student_id: int) -> Student:
        """Return the student with this ID or raise KeyError."""
        with self._lock:
            return self._find(student_id)

    def create(self, data: Any) -> Student:
        """Add a student from a mapping of its fields and return it."""
        changes = _parse(data)
        with self._lock:
            student = Student(id=self._next_id, **changes)
            self._students[student.id] = student
            self._next_id += 1
            return student

    def update(self, student_id: int, data: Any) -> Student:
        """Overwrite the fields present in ``data`` and return the updated student."""
        changes = _parse(data)
        with self._lock:
            student = replace(self._find(student_id), **changes)
            self._students[student_id] = student
            return student

    def delete(self, student_id: int) -> Student:
        """Remove the student with this ID and return it; raises KeyError."""
        with self._lock:
            student = self._find(student_id)
            del self._students[student_id]
            return student


class _InvalidStudentID(Exception):
    pass


def _student_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise _InvalidStudentID(raw) from None


def create_app(store: StudentStore) -> Flask:
    """Build the application serving the student routes."""
    app = Flask(__name__)

    @app.errorhandler(_InvalidStudentID)
    def invalid_id(_exc):
        return jsonify(message="Invalid student ID"), 400

    @app.errorhandler(KeyError)
    def not_found(_exc):
        return jsonify(message="Student not found"), 404

    @app.errorhandler(ValueError)
    def invalid_data(_exc):
        return jsonify(message="Invalid student data"), 400

    @app.get("/students")
    def get_students():
        return jsonify([student.to_dict() for student in store.list()]), 200

    @app.get("/students/<raw_id>")
    def get_student(raw_id: str):
        return jsonify(store.get(_student_id(raw_id)).to_dict()), 200

    @app.post("/students")
    def create_student():
        return jsonify(store.create(request.get_json(silent=True)).to_dict()), 201

    @app.put("/students/<raw_id>")
    def update_student(raw_id: str):
        student_id = _student_id(raw_id)
        return jsonify(store.update(student_id, request.get_json(silent=True)).to_dict()), 200

    @app.delete("/students/<raw_id>")
    def delete_student(raw_id: str):
        store.delete(_student_id(raw_id))
        return "", 204

    return app