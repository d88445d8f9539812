from enum import StrEnum, Enum, auto


class Solver(StrEnum):
    HIGHS = "HiGHS"  # scipy.optimize.milp (LP / MILP)
    SLSQP = "SLSQP"  # scipy.optimize.minimize (continuous NLP)


class ObjectiveSense(StrEnum):
    MIN = "min"
    MAX = "max"


class ConstraintKind(StrEnum):
    LOWER_BOUND = "lower_bound"  # x >= l
    UPPER_BOUND = "upper_bound"  # x <= u
    FIXED = "fixed"  # x == v
    INTEGER = "integer"
    ZERO_ONE = "zero_one"
    AFFINE_GE = "affine_ge"  # a'x >= b (cuts)
    AFFINE_LE = "affine_le"  # a'x <= b
    AFFINE_EQ = "affine_eq"  # a'x == b


class IntegralityChangeType(Enum):
    RELAX_INTEGER = auto()
    RESTRICT_INTEGER = auto()
    RELAX_BINARY = auto()
    RESTRICT_BINARY = auto()


VARIABLE_KINDS = (
    ConstraintKind.LOWER_BOUND,
    ConstraintKind.UPPER_BOUND,
    ConstraintKind.FIXED,
    ConstraintKind.INTEGER,
    ConstraintKind.ZERO_ONE,
)

AFFINE_KINDS = (
    ConstraintKind.AFFINE_GE,
    ConstraintKind.AFFINE_LE,
    ConstraintKind.AFFINE_EQ,
)

DEFAULT_INT_TOL = 1e-6
DEFAULT_NODE_LIMIT = 1000
DEFAULT_BEAM_WIDTH = 10
DEFAULT_MAX_DISCREPANCY = 2
DEFAULT_MILP_TIME_LIMIT = 60.0
DEFAULT_NLP_MAXITER = 1000
DEFAULT_NLP_FTOL = 1e-9
