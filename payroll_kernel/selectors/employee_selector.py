"""Employee selector - employee and position lookups."""

from sqlalchemy import select

from payroll_kernel.domain.dtos import EmployeeInfo
from payroll_kernel.exceptions import EmployeeNotFoundError
from payroll_kernel.models.employee import Employee
from payroll_kernel.selectors.base import BaseSelector


class EmployeeSelector(BaseSelector[Employee]):
    """Read-only employee queries returning EmployeeInfo DTOs."""

    def get(self, employee_id: int) -> EmployeeInfo:
        """
        Raises:
            EmployeeNotFoundError: No employee with that id.
        """
        employee = self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(str(employee_id))
        return EmployeeInfo.from_model(employee)

    def list_all(self) -> list[EmployeeInfo]:
        stmt = select(Employee).order_by(Employee.id)
        return [
            EmployeeInfo.from_model(e)
            for e in self.session.execute(stmt).unique().scalars()
        ]
