"""
ORM models for the franchise network: organizations, users, catalog,
students/teachers, learning groups, trainings, products, inventory and orders.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .organization import (  # noqa: F401
    HQ,
    MasterFranchisee,
    LearningCenter,
    TeacherTrainer,
)
from .security import User  # noqa: F401
from .catalog import (  # noqa: F401
    Program,
    ProgramMfShare,
    SubProgram,
    SubProgramMfShare,
    SubProgramLcShare,
)
from .people import (  # noqa: F401
    Student,
    Teacher,
)
from .learning import LearningGroup  # noqa: F401
from .commerce import (  # noqa: F401
    Product,
    InventoryTransaction,
    Order,
    OrderLine,
)
from .training import (  # noqa: F401
    TrainingType,
    Training,
)
