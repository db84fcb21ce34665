from nested_students.schemas.student import StudentCreate, StudentUpdate, StudentResponse
