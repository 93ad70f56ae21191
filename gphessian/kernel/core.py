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

"""Core kernel classes: contains the base :py:class:`Kernel` class defining the covariance contract.
"""

from ..error_handling import GPArgumentError, GPDimensionError

import numpy

class Kernel(object):
    """Covariance kernel base class. Not meant to be explicitly instantiated!
    
    A kernel is stateless with respect to its hyperparameters: every
    operation takes the covariance hyperparameter vector as its first
    argument. The only state a kernel instance carries is whatever cache its
    Hessian implementation needs, so independent computations should use
    independent kernel instances.
    
    Parameters
    ----------
    num_dim : positive int
        Number of dimensions of the input data. Default is 1.
    num_params : Non-negative int
        Number of hyperparameters in the model.
    param_names : list of str (`num_params`,), optional
        List of labels for the hyperparameters. Default is all empty strings.
    
    Attributes
    ----------
    num_params : int
        Number of parameters
    num_dim : int
        Number of dimensions
    param_names : list of str, (`num_params`,)
        List of the labels for the hyperparameters.
    supports_hessian : bool
        Whether :py:meth:`hessian` is implemented.
    
    Raises
    ------
    ValueError
        If `num_dim` is not a positive integer or the lengths of the input
        vectors are inconsistent.
    """
    supports_hessian = False
    
    def __init__(self, num_dim=1, num_params=0, param_names=None):
        if not isinstance(num_params, int) or num_params < 0:
            raise ValueError("num_params must be an integer >= 0!")
        self.num_params = num_params
        if param_names is None:
            param_names = [''] * self.num_params
        elif len(param_names) != self.num_params:
            raise ValueError("param_names must be a list of length num_params!")
        self.param_names = list(param_names)
        
        if not isinstance(num_dim, int) or num_dim < 1:
            raise ValueError("num_dim must be an integer > 0!")
        self.num_dim = num_dim
    
    def dimensions(self):
        """Returns the number of hyperparameters the kernel expects.
        """
        return self.num_params
    
    def evaluate(self, hyperparameters, x, z=None):
        """Evaluate the covariance matrix between `x` and `z`.
        
        Parameters
        ----------
        hyperparameters : :py:class:`Array`, (`num_params`,)
            Covariance hyperparameters.
        x : :py:class:`Array`, (`N`, `D`)
            `N` inputs with dimension `D`.
        z : :py:class:`Array`, (`M`, `D`), None or 'diag', optional
            `M` inputs with dimension `D`. If None, `z` = `x`. If 'diag',
            only the diagonal of :math:`K(x, x)` is returned.
        
        Returns
        -------
        K : :py:class:`Array`, (`N`, `M`) or (`N`,)
        
        Notes
        -----
        THIS IS ONLY A METHOD STUB TO DEFINE THE NEEDED CALLING FINGERPRINT!
        """
        raise NotImplementedError("This is an abstract method -- please use "
                                  "one of the implementing subclasses!")
    
    def gradient(self, hyperparameters, x, z, i):
        """Evaluate :math:`\\partial K / \\partial \\theta_i`.
        
        Notes
        -----
        THIS IS ONLY A METHOD STUB TO DEFINE THE NEEDED CALLING FINGERPRINT!
        """
        raise NotImplementedError("This is an abstract method -- please use "
                                  "one of the implementing subclasses!")
    
    def hessian(self, hyperparameters, x, z, i, j):
        """Evaluate :math:`\\partial^2 K / \\partial \\theta_i \\partial \\theta_j`.
        
        Notes
        -----
        THIS IS ONLY A METHOD STUB TO DEFINE THE NEEDED CALLING FINGERPRINT!
        """
        raise NotImplementedError("This kernel does not support Hessians with "
                                  "respect to its hyperparameters!")
    
    def begin_sweep(self, hyperparameters, x, z=None):
        """Prepare for a sequence of :py:meth:`hessian` calls at fixed `hyperparameters`, `x`, `z`.
        
        Does nothing unless a subclass caches intermediate results.
        """
        pass
    
    def __call__(self, hyperparameters, x, z=None):
        return self.evaluate(hyperparameters, x, z)
    
    def _check_inputs(self, hyperparameters, x, z=None):
        """Cast and validate the arguments shared by every kernel operation.
        
        Returns
        -------
        hyperparameters : :py:class:`Array`, (`num_params`,)
        x : :py:class:`Array`, (`N`, `num_dim`)
        z : :py:class:`Array`, (`M`, `num_dim`), or None or 'diag'
        
        Raises
        ------
        GPDimensionError
            If the number of hyperparameters or the input dimension does not
            match the kernel.
        """
        hyperparameters = numpy.asarray(hyperparameters, dtype=float)
        if hyperparameters.shape != (self.num_params,):
            raise GPDimensionError(
                "Kernel takes %d hyperparameters, got %d!"
                % (self.num_params, hyperparameters.size)
            )
        x = self._check_x(x)
        if z is None or (isinstance(z, str) and z == 'diag'):
            return hyperparameters, x, z
        if isinstance(z, str):
            raise GPArgumentError("z must be an array, None or 'diag'!")
        z = self._check_x(z)
        return hyperparameters, x, z
    
    def _check_x(self, x):
        x = numpy.asarray(x, dtype=float)
        if x.ndim == 1:
            x = x[:, None]
        if x.ndim != 2 or x.shape[1] != self.num_dim:
            raise GPDimensionError(
                "Inputs must have shape (N, %d), got %s!" % (self.num_dim, x.shape)
            )
        return x
    
    def _check_index(self, i):
        if not isinstance(i, (int, numpy.integer)) or i < 0 or i >= self.num_params:
            raise GPArgumentError(
                "Hyperparameter index must be an integer in [0, %d), got %r!"
                % (self.num_params, i)
            )
        return int(i)
