from nested_students.crud.students import crud_student

__all__ = [
    "crud_student",
]
