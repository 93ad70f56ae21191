# Copyright 2014 Mark Chilenski
# This program is distributed under the terms of the GNU General Purpose License (GPL).
# Refer to http://www.gnu.org/licenses/gpl.txt
# 
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# 
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
# 
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Exact inference with a Gaussian likelihood, including the Hessian of the negative log marginal likelihood.

The main entry point is :py:func:`exact_inference`, which depending on
`nargout` returns the posterior, the negative log marginal likelihood
`nlZ`, its gradient `dnlZ` and its Hessian `HnlZ` with respect to all of the
covariance, noise and mean hyperparameters.

Two parameterizations of :math:`(K + \\sigma^2 I)^{-1}` are used:

* high noise (:math:`\\sigma^2 \\geq 10^{-6}`): `posterior.L` holds the
  upper Cholesky factor of :math:`K/\\sigma^2 + I`.
* low noise: `posterior.L` holds :math:`-(K + \\sigma^2 I)^{-1}` since the
  factor above becomes ill-conditioned.
"""

from .error_handling import GPArgumentError, GPDimensionError
from .hyperparameters import Hyperparameters
from .mean import ZeroMeanFunction
from .utils import solve_chol, is_chol, product_trace

import warnings
import numpy
import scipy
import scipy.linalg

NOISE_THRESHOLD = 1e-6
"""Noise variance at or above which the high-noise parameterization is used."""

GAUSSIAN_LIKELIHOODS = (None, 'gaussian', 'Gaussian', 'likGauss')

class Posterior(object):
    """Sufficient statistics of the GP posterior after conditioning on the training data.
    
    Parameters
    ----------
    alpha : :py:class:`Array`, (`N`,)
        :math:`(K + \\sigma^2 I)^{-1}(y - \\mu(x))`.
    L : :py:class:`Array`, (`N`, `N`)
        Either the upper Cholesky factor of :math:`K/\\sigma^2 + I` (high
        noise) or :math:`-(K + \\sigma^2 I)^{-1}` (low noise).
    sW : :py:class:`Array`, (`N`,)
        Square root of the noise precision at each training point.
    high_noise : bool or None, optional
        Which parameterization `L` uses. If None, it is inferred from the
        structure of `L` when the posterior is passed back in. Default is None.
    """
    def __init__(self, alpha, L, sW, high_noise=None):
        self.alpha = numpy.asarray(alpha, dtype=float)
        self.L = numpy.asarray(L, dtype=float)
        self.sW = numpy.asarray(sW, dtype=float)
        self.high_noise = high_noise
    
    def __repr__(self):
        return "Posterior(N=%d, high_noise=%r)" % (len(self.alpha), self.high_noise)

class Gradient(object):
    """Gradient of the negative log marginal likelihood, with the same block structure as :py:class:`~gphessian.hyperparameters.Hyperparameters`.
    """
    def __init__(self, num_cov, num_mean):
        self.cov = numpy.zeros(num_cov)
        self.lik = 0.0
        self.mean = numpy.zeros(num_mean)
    
    def to_vector(self):
        """Flatten to a single array ordered as (cov, lik, mean).
        """
        return numpy.concatenate((self.cov, [self.lik], self.mean))

class Hessian(object):
    """Hessian of the negative log marginal likelihood.
    
    Attributes
    ----------
    H : :py:class:`Array`, (`num_cov` + 1 + `num_mean`, `num_cov` + 1 + `num_mean`)
        The symmetric Hessian matrix.
    covariance_ind : :py:class:`Array` of int, (`num_cov`,)
        Rows/columns of `H` belonging to the covariance hyperparameters.
    likelihood_ind : int
        Row/column of `H` belonging to the log noise standard deviation.
    mean_ind : :py:class:`Array` of int, (`num_mean`,)
        Rows/columns of `H` belonging to the mean hyperparameters.
    """
    def __init__(self, num_cov, num_mean):
        num_params = num_cov + 1 + num_mean
        self.H = numpy.zeros((num_params, num_params))
        self.covariance_ind = numpy.arange(0, num_cov)
        self.likelihood_ind = num_cov
        self.mean_ind = numpy.arange(num_cov + 1, num_params)

def exact_inference(hyperparameters, mean_function, covariance_function,
                    likelihood, x, y, nargout=4, noise_threshold=NOISE_THRESHOLD):
    r"""Exact GP inference with a Gaussian likelihood, optionally returning the Hessian of `nlZ`.
    
    Both `mean_function` and `covariance_function` must support Hessians with
    respect to their hyperparameters when `nargout` is 4.
    
    Parameters
    ----------
    hyperparameters : :py:class:`~gphessian.hyperparameters.Hyperparameters`
        The `cov`, `lik` and `mean` hyperparameter blocks.
    mean_function : :py:class:`~gphessian.mean.MeanFunction` or None
        The mean function. None is a zero mean.
    covariance_function : :py:class:`~gphessian.kernel.core.Kernel`
        The covariance kernel.
    likelihood : str or None
        Ignored: a Gaussian likelihood is always used.
    x : :py:class:`Array` or other Array-like, (`N`, `D`)
        Training inputs.
    y : :py:class:`Array` or other Array-like, (`N`,), or :py:class:`Posterior`
        Training targets, or a posterior previously computed with the same
        hyperparameters, mean, covariance and inputs.
    nargout : int, optional
        Number of outputs to return, from 1 to 4. Default is 4.
    noise_threshold : float, optional
        Noise variance at or above which the high-noise parameterization is
        used. Default is :py:data:`NOISE_THRESHOLD`.
    
    Returns
    -------
    posterior : :py:class:`Posterior`
        Always returned.
    nlZ : float
        Negative log marginal likelihood. Returned if `nargout` >= 2.
    dnlZ : :py:class:`Gradient`
        Returned if `nargout` >= 3.
    HnlZ : :py:class:`Hessian`
        Returned if `nargout` == 4.
    
    Raises
    ------
    GPArgumentError
        If `nargout` is not in 1..4 or the Hessian is requested from a mean or
        covariance function that cannot provide second derivatives.
    GPDimensionError
        If the shapes of `x`, `y` or the hyperparameters are inconsistent.
    numpy.linalg.LinAlgError
        If :math:`K + \sigma^2 I` is not positive definite.
    """
    if nargout not in (1, 2, 3, 4):
        raise GPArgumentError("nargout must be 1, 2, 3 or 4!")
    if likelihood not in GAUSSIAN_LIKELIHOODS:
        warnings.warn(
            "Likelihood %r ignored: exact inference always uses a Gaussian "
            "likelihood." % (likelihood,),
            UserWarning
        )
    
    # Lower levels are the standard exact Gaussian inference:
    if nargout <= 3:
        return gaussian_inference(hyperparameters, mean_function,
                                  covariance_function, x, y, nargout=nargout,
                                  noise_threshold=noise_threshold)
    
    if mean_function is None:
        mean_function = ZeroMeanFunction(num_dim=covariance_function.num_dim)
    if not getattr(covariance_function, 'supports_hessian', False):
        raise GPArgumentError("covariance_function does not support Hessians!")
    if not getattr(mean_function, 'supports_hessian', False):
        raise GPArgumentError("mean_function does not support Hessians!")
    
    x, y = _check_data(hyperparameters, mean_function, covariance_function, x, y)
    
    n = x.shape[0]
    num_cov = hyperparameters.num_cov
    num_mean = hyperparameters.num_mean
    noise_variance = hyperparameters.noise_variance
    
    dnlZ = Gradient(num_cov, num_mean)
    HnlZ = Hessian(num_cov, num_mean)
    H = HnlZ.H
    lik = HnlZ.likelihood_ind
    
    posterior, residual, L, factor, high_noise = _assemble_posterior(
        hyperparameters, mean_function, covariance_function, x, y, noise_threshold
    )
    alpha = posterior.alpha
    
    def V_inv_times(B):
        return solve_chol(L, B) * factor
    
    nlZ = _nlZ(L, residual, alpha, factor)
    
    V_inv = _V_inv(posterior, L, factor, high_noise)
    
    # (K + sigma^2 I)^{-1} alpha is used a lot:
    V_inv_alpha = V_inv.dot(alpha)
    
    # Noise block:
    dnlZ.lik = noise_variance * (numpy.trace(V_inv) - alpha.dot(alpha))
    H[lik, lik] = (
        2.0 * noise_variance**2 *
        (2.0 * alpha.dot(V_inv_alpha) - product_trace(V_inv, V_inv)) +
        2.0 * dnlZ.lik
    )
    
    # Mean block:
    dm = numpy.zeros((n, num_mean))
    for i in range(0, num_mean):
        dm[:, i] = mean_function.gradient(hyperparameters.mean, x, i)
        dnlZ.mean[i] = -dm[:, i].dot(alpha)
        for j in range(0, i + 1):
            d2m_didj = mean_function.hessian(hyperparameters.mean, x, i, j)
            H[HnlZ.mean_ind[i], HnlZ.mean_ind[j]] = (
                dm[:, i].dot(V_inv_times(dm[:, j])) - d2m_didj.dot(alpha)
            )
        H[HnlZ.mean_ind[i], lik] = 2.0 * noise_variance * dm[:, i].dot(V_inv_alpha)
    
    # Covariance block. V^{-1} dK_i is kept for every i since it recurs in
    # the covariance/covariance, covariance/mean and covariance/noise terms.
    V_inv_dK = numpy.zeros((num_cov, n, n))
    covariance_function.begin_sweep(hyperparameters.cov, x)
    for i in range(0, num_cov):
        dK = covariance_function.gradient(hyperparameters.cov, x, None, i)
        V_inv_dK[i] = V_inv_times(dK)
        
        dnlZ.cov[i] = 0.5 * (numpy.trace(V_inv_dK[i]) - alpha.dot(dK).dot(alpha))
        
        V_inv_dK_alpha = V_inv_dK[i].dot(alpha)
        for j in range(0, i + 1):
            HK = covariance_function.hessian(hyperparameters.cov, x, None, i, j)
            H[HnlZ.covariance_ind[i], HnlZ.covariance_ind[j]] = (
                residual.dot(V_inv_dK[i]).dot(V_inv_dK[j]).dot(alpha) +
                0.5 * (
                    product_trace(V_inv, HK) -
                    product_trace(V_inv_dK[i], V_inv_dK[j].T) -
                    alpha.dot(HK).dot(alpha)
                )
            )
        
        for j in range(0, num_mean):
            H[HnlZ.mean_ind[j], HnlZ.covariance_ind[i]] = dm[:, j].dot(V_inv_dK_alpha)
        
        H[lik, HnlZ.covariance_ind[i]] = noise_variance * (
            2.0 * residual.dot(V_inv_dK[i]).dot(V_inv_alpha) -
            product_trace(V_inv_dK[i], V_inv)
        )
    
    # Only the lower triangle has been filled in:
    HnlZ.H = H + numpy.tril(H, -1).T
    
    return posterior, nlZ, dnlZ, HnlZ

def gaussian_inference(hyperparameters, mean_function, covariance_function, x, y,
                       nargout=3, noise_threshold=NOISE_THRESHOLD):
    r"""Standard exact inference with a Gaussian likelihood, up to the gradient.
    
    Uses the same parameterization of the posterior as :py:func:`exact_inference`
    and follows Algorithm 2.1 of Rasmussen and Williams.
    
    Parameters
    ----------
    hyperparameters : :py:class:`~gphessian.hyperparameters.Hyperparameters`
        The `cov`, `lik` and `mean` hyperparameter blocks.
    mean_function : :py:class:`~gphessian.mean.MeanFunction` or None
        The mean function. None is a zero mean.
    covariance_function : :py:class:`~gphessian.kernel.core.Kernel`
        The covariance kernel.
    x : :py:class:`Array` or other Array-like, (`N`, `D`)
        Training inputs.
    y : :py:class:`Array` or other Array-like, (`N`,), or :py:class:`Posterior`
        Training targets or a previously computed posterior.
    nargout : int, optional
        Number of outputs to return, from 1 to 3. Default is 3.
    noise_threshold : float, optional
        Noise variance at or above which the high-noise parameterization is
        used. Default is :py:data:`NOISE_THRESHOLD`.
    
    Returns
    -------
    posterior : :py:class:`Posterior`
    nlZ : float
        Returned if `nargout` >= 2.
    dnlZ : :py:class:`Gradient`
        Returned if `nargout` == 3.
    """
    if nargout not in (1, 2, 3):
        raise GPArgumentError("nargout must be 1, 2 or 3!")
    if mean_function is None:
        mean_function = ZeroMeanFunction(num_dim=covariance_function.num_dim)
    
    x, y = _check_data(hyperparameters, mean_function, covariance_function, x, y)
    
    posterior, residual, L, factor, high_noise = _assemble_posterior(
        hyperparameters, mean_function, covariance_function, x, y, noise_threshold
    )
    if nargout == 1:
        return posterior
    
    alpha = posterior.alpha
    nlZ = _nlZ(L, residual, alpha, factor)
    if nargout == 2:
        return posterior, nlZ
    
    noise_variance = hyperparameters.noise_variance
    dnlZ = Gradient(hyperparameters.num_cov, hyperparameters.num_mean)
    
    Q = _V_inv(posterior, L, factor, high_noise) - numpy.outer(alpha, alpha)
    for i in range(0, hyperparameters.num_cov):
        dK = covariance_function.gradient(hyperparameters.cov, x, None, i)
        dnlZ.cov[i] = 0.5 * product_trace(Q, dK)
    dnlZ.lik = noise_variance * numpy.trace(Q)
    for i in range(0, hyperparameters.num_mean):
        dnlZ.mean[i] = -mean_function.gradient(hyperparameters.mean, x, i).dot(alpha)
    
    return posterior, nlZ, dnlZ

def _check_data(hyperparameters, mean_function, covariance_function, x, y):
    """Validate shapes before any factorization is attempted.
    
    Returns
    -------
    x : :py:class:`Array`, (`N`, `D`)
    y : :py:class:`Array`, (`N`,), or :py:class:`Posterior`
    """
    if not isinstance(hyperparameters, Hyperparameters):
        raise GPArgumentError("hyperparameters must be an instance of Hyperparameters!")
    
    x = numpy.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x[:, None]
    if x.ndim != 2:
        raise GPDimensionError("x must have shape (N, D)!")
    n = x.shape[0]
    
    if x.shape[1] != covariance_function.num_dim:
        raise GPDimensionError(
            "x has %d features but the covariance function expects %d!"
            % (x.shape[1], covariance_function.num_dim)
        )
    if hyperparameters.num_cov != covariance_function.num_params:
        raise GPDimensionError(
            "Covariance function takes %d hyperparameters, got %d!"
            % (covariance_function.num_params, hyperparameters.num_cov)
        )
    if hyperparameters.num_mean != mean_function.num_params:
        raise GPDimensionError(
            "Mean function takes %d hyperparameters, got %d!"
            % (mean_function.num_params, hyperparameters.num_mean)
        )
    
    if isinstance(y, Posterior):
        if y.alpha.shape != (n,):
            raise GPDimensionError("posterior.alpha must have length %d!" % (n,))
        if y.L.shape != (n, n):
            raise GPDimensionError("posterior.L must have shape (%d, %d)!" % (n, n))
    else:
        y = numpy.asarray(y, dtype=float)
        if y.ndim == 2 and y.shape[1] == 1:
            y = y[:, 0]
        if y.shape != (n,):
            raise GPDimensionError(
                "Training targets y must have shape (%d,), got %s!" % (n, y.shape)
            )
    return x, y

def _assemble_posterior(hyperparameters, mean_function, covariance_function, x, y,
                        noise_threshold):
    """Compute or reconstruct the posterior and the factorization of :math:`K + \\sigma^2 I`.
    
    Returns
    -------
    posterior : :py:class:`Posterior`
    residual : :py:class:`Array`, (`N`,)
        :math:`y - \\mu(x)`.
    L : :py:class:`Array`, (`N`, `N`)
        Upper Cholesky factor such that
        :math:`(K + \\sigma^2 I)^{-1} = \\mathrm{solve\\_chol}(L, I) \\cdot factor`.
    factor : float
        :math:`1/\\sigma^2` for high noise, 1 for low noise.
    high_noise : bool
        Which parameterization `posterior.L` uses.
    """
    n = x.shape[0]
    I = numpy.eye(n)
    noise_variance = hyperparameters.noise_variance
    K = covariance_function.evaluate(hyperparameters.cov, x)
    
    if isinstance(y, Posterior):
        posterior = y
        high_noise = posterior.high_noise
        if high_noise is None:
            warnings.warn(
                "Posterior does not record its parameterization, inferring it "
                "from the structure of posterior.L.",
                RuntimeWarning
            )
            high_noise = is_chol(posterior.L)
        
        V = K + noise_variance * I
        residual = V.dot(posterior.alpha)
        if high_noise:
            # posterior.L contains chol(K / sigma^2 + I):
            factor = 1.0 / noise_variance
            L = posterior.L
        else:
            # posterior.L contains -inv(K + sigma^2 I), recompute the factor:
            factor = 1.0
            L = scipy.linalg.cholesky(V, lower=False)
    else:
        residual = y - mean_function.evaluate(hyperparameters.mean, x)
        high_noise = bool(noise_variance >= noise_threshold)
        if high_noise:
            factor = 1.0 / noise_variance
            L = scipy.linalg.cholesky(K * factor + I, lower=False)
            stored_L = L
        else:
            factor = 1.0
            L = scipy.linalg.cholesky(K + noise_variance * I, lower=False)
            stored_L = -solve_chol(L, I)
        posterior = Posterior(
            solve_chol(L, residual) * factor,
            stored_L,
            numpy.ones(n) / numpy.sqrt(noise_variance),
            high_noise=high_noise
        )
    
    return posterior, residual, L, factor, high_noise

def _nlZ(L, residual, alpha, factor):
    n = len(alpha)
    return (
        numpy.log(numpy.diag(L)).sum() +
        0.5 * (residual.dot(alpha) + n * numpy.log(2.0 * numpy.pi / factor))
    )

def _V_inv(posterior, L, factor, high_noise):
    """Dense :math:`(K + \\sigma^2 I)^{-1}`.
    """
    if not high_noise:
        # Already available in the low-noise parameterization:
        return -posterior.L
    return solve_chol(L, numpy.eye(L.shape[0])) * factor
