"""School Attendance package.

Face-descriptor attendance and meal tracking, organized by feature modules
(students, attendance, meals, sessions, ...) with a thin Flask controller
layer over service/repository layers.
"""
