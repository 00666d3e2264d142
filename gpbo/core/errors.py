"""Exceptions raised by the GP core."""


class GPError(Exception):
    """Base class for all gpbo errors."""


class InputContractError(GPError, ValueError):
    """Arguments violate a shape, naming or value contract."""


class NotPositiveDefiniteError(GPError, ValueError):
    """A covariance matrix is not positive (semi-)definite."""


class IllConditionedCovarianceError(NotPositiveDefiniteError):
    """
    Training covariance could not be Cholesky-factorised after adding noise and jitter.

    Usually caused by duplicate or near-duplicate training points, or by
    hyperparameters in a pathological region (e.g. a huge length-scale).
    """
