"""
Employee service - loads and updates employees for salary withdrawal.

The withdrawal path works on the locked ORM row; nothing here is returned
outside the kernel (selectors hand out EmployeeInfo DTOs instead).
"""

from datetime import datetime

from sqlalchemy import select

from payroll_kernel.exceptions import EmployeeNotFoundError
from payroll_kernel.models.employee import Employee
from payroll_kernel.services.base import BaseService


class EmployeeService(BaseService[Employee]):
    """Flush-only access to employee withdrawal state."""

    def lock_for_withdrawal(self, employee_id: int) -> Employee:
        """
        Load an employee with their position, locking the employee row.

        The lock (``SELECT ... FOR UPDATE OF employee`` on PostgreSQL) is
        held until the caller's transaction ends, so two withdrawals for the
        same employee are serialized and the second one sees the first one's
        ``withdrawn`` / ``last_month``.

        Raises:
            EmployeeNotFoundError: No employee with that id.
        """
        stmt = (
            select(Employee)
            .where(Employee.id == employee_id)
            .with_for_update(of=Employee)
        )
        employee = self.session.execute(stmt).unique().scalar_one_or_none()
        if employee is None:
            raise EmployeeNotFoundError(str(employee_id))
        return employee

    def mark_withdrawn(self, employee: Employee, at: datetime) -> None:
        employee.withdrawn = True
        employee.last_month = at
        self.session.flush()
