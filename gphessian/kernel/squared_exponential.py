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

"""Provides the :py:class:`ARDSquaredExponentialKernel` class that implements the anisotropic SE kernel with Hessian support.
"""

from .core import Kernel
from ..error_handling import GPArgumentError

import numpy
import scipy.spatial.distance

class ARDSquaredExponentialKernel(Kernel):
    r"""Squared exponential covariance kernel with automatic relevance determination.
    
    Supports first and second derivatives with respect to the hyperparameters.
    
    The kernel has the following hyperparameters, always referenced in the
    order listed:
    
    ========= ========== ===================================================
    0         log(l_1)   log length scale for the first dimension
    1         log(l_2)   ...and so on for all `num_dim` dimensions
    `num_dim` log(sigma) log of the prefactor on the SE
    ========= ========== ===================================================
    
    The kernel is defined as:
    
    .. math::
    
        k_{SE} = \sigma^2 \exp\left(-\frac{1}{2}\sum_k\frac{\tau_k^2}{l_k^2}\right)
    
    The zeroth-order kernel matrix is a common factor of every length scale
    Hessian, so :py:meth:`hessian` caches it. The cache belongs to the
    instance: it is refreshed whenever the pair (0, 0) is requested or
    :py:meth:`begin_sweep` is called, and it is recomputed automatically if
    the hyperparameters or inputs differ from those it was built for.
    
    Parameters
    ----------
    num_dim : int
        Number of dimensions of the input data.
    param_names : list of str, optional
        Labels for the hyperparameters.
    
    Raises
    ------
    ValueError
        If `num_dim` is not a positive integer.
    """
    descriptor = '(D+1)'
    supports_hessian = True
    
    def __init__(self, num_dim=1, param_names=None):
        if param_names is None:
            param_names = ['log l_%d' % (i + 1,) for i in range(0, num_dim)] + [r'log \sigma_f']
        super(ARDSquaredExponentialKernel, self).__init__(num_dim=num_dim,
                                                          num_params=num_dim + 1,
                                                          param_names=param_names)
        self.clear_cache()
    
    def evaluate(self, hyperparameters, x, z=None):
        """Evaluate the covariance matrix between `x` and `z`.
        
        Parameters
        ----------
        hyperparameters : :py:class:`Array` or other Array-like, (`num_dim` + 1,)
            Log length scales followed by the log output scale.
        x : :py:class:`Array` or other Array-like, (`N`, `num_dim`)
            `N` inputs with dimension `num_dim`.
        z : :py:class:`Array`, (`M`, `num_dim`), None or 'diag', optional
            If None, `z` = `x`. If 'diag', only the diagonal of
            :math:`K(x, x)` is computed. Default is None.
        
        Returns
        -------
        K : :py:class:`Array`, (`N`, `M`) or (`N`,)
        """
        hyperparameters, x, z = self._check_inputs(hyperparameters, x, z)
        return self._evaluate(hyperparameters, x, z)
    
    def gradient(self, hyperparameters, x, z, i):
        r"""Evaluate :math:`\partial K / \partial \theta_i`.
        
        Length scale derivatives are :math:`K\tau_i^2/l_i^2`; the output scale
        derivative is :math:`2K`.
        
        Parameters
        ----------
        hyperparameters : :py:class:`Array` or other Array-like, (`num_dim` + 1,)
            Covariance hyperparameters.
        x : :py:class:`Array` or other Array-like, (`N`, `num_dim`)
            `N` inputs.
        z : :py:class:`Array`, (`M`, `num_dim`), None or 'diag'
            Second set of inputs, as for :py:meth:`evaluate`.
        i : int
            Index of the hyperparameter.
        
        Returns
        -------
        dK : :py:class:`Array`, (`N`, `M`) or (`N`,)
        """
        hyperparameters, x, z = self._check_inputs(hyperparameters, x, z)
        i = self._check_index(i)
        return self._gradient(hyperparameters, x, z, i)
    
    def hessian(self, hyperparameters, x, z, i, j):
        r"""Evaluate :math:`\partial^2 K / \partial \theta_i \partial \theta_j`.
        
        Parameters
        ----------
        hyperparameters : :py:class:`Array` or other Array-like, (`num_dim` + 1,)
            Covariance hyperparameters.
        x : :py:class:`Array` or other Array-like, (`N`, `num_dim`)
            `N` inputs.
        z : :py:class:`Array`, (`M`, `num_dim`) or None
            Second set of inputs. If None, `z` = `x`.
        i, j : int
            Indices of the hyperparameters.
        
        Returns
        -------
        HK : :py:class:`Array`, (`N`, `M`)
        
        Raises
        ------
        GPArgumentError
            If `z` is 'diag', which is not supported for Hessians.
        """
        hyperparameters, x, z = self._check_inputs(hyperparameters, x, z)
        if isinstance(z, str):
            raise GPArgumentError("Hessians are not supported with z='diag'!")
        i = self._check_index(i)
        j = self._check_index(j)
        return self._hessian(hyperparameters, x, z, i, j)
    
    def begin_sweep(self, hyperparameters, x, z=None):
        """Compute and cache :math:`K(x, z)` ahead of a sequence of :py:meth:`hessian` calls.
        """
        hyperparameters, x, z = self._check_inputs(hyperparameters, x, z)
        if isinstance(z, str):
            raise GPArgumentError("Hessians are not supported with z='diag'!")
        self._update_cache(hyperparameters, x, z)
    
    def clear_cache(self):
        """Drop the cached kernel matrix.
        """
        self._K = None
        self._cache_key = None
    
    def _evaluate(self, hyperparameters, x, z):
        sf2 = numpy.exp(2.0 * hyperparameters[-1])
        if isinstance(z, str):
            return sf2 * numpy.ones(x.shape[0])
        if z is None:
            z = x
        ell = numpy.exp(hyperparameters[:-1])
        r2l2 = scipy.spatial.distance.cdist(x / ell, z / ell, 'sqeuclidean')
        return sf2 * numpy.exp(-r2l2 / 2.0)
    
    def _gradient(self, hyperparameters, x, z, i):
        if i == self.num_dim:
            return 2.0 * self._evaluate(hyperparameters, x, z)
        if isinstance(z, str):
            return numpy.zeros(x.shape[0])
        if z is None:
            z = x
        return self._evaluate(hyperparameters, x, z) * self._scaled_sq_diff(hyperparameters, x, z, i)
    
    def _hessian(self, hyperparameters, x, z, i, j):
        if i > j:
            return self._hessian(hyperparameters, x, z, j, i)
        
        # Anything involving the log output scale is just twice the gradient:
        if j == self.num_dim:
            return 2.0 * self._gradient(hyperparameters, x, z, i)
        
        if z is None:
            z = x
        
        if (i == 0 and j == 0) or not self._cache_valid(hyperparameters, x, z):
            self._update_cache(hyperparameters, x, z)
        
        first_factor = self._scaled_sq_diff(hyperparameters, x, z, i)
        second_factor = self._scaled_sq_diff(hyperparameters, x, z, j) - 2.0 * (i == j)
        
        return first_factor * second_factor * self._K
    
    def _scaled_sq_diff(self, hyperparameters, x, z, k):
        """Pairwise :math:`(x_k/l_k - z_k/l_k)^2` for dimension `k`.
        """
        ell_inv = numpy.exp(-hyperparameters[k])
        return numpy.subtract.outer(x[:, k] * ell_inv, z[:, k] * ell_inv)**2
    
    def _update_cache(self, hyperparameters, x, z):
        if z is None:
            z = x
        self._K = self._evaluate(hyperparameters, x, z)
        self._cache_key = (hyperparameters.copy(), x.copy(), z.copy())
    
    def _cache_valid(self, hyperparameters, x, z):
        if self._cache_key is None:
            return False
        cached_params, cached_x, cached_z = self._cache_key
        return (
            numpy.array_equal(cached_params, hyperparameters) and
            numpy.array_equal(cached_x, x) and
            numpy.array_equal(cached_z, z)
        )
