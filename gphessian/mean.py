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

"""Provides classes for defining explicit, parametric mean functions.

A mean function supplies its value at the training inputs and its first and
second derivatives with respect to its own hyperparameters. Every operation
takes the mean hyperparameter vector as its first argument, so the
:py:class:`~gphessian.hyperparameters.Hyperparameters` record stays the
single source of truth for hyperparameter values.
"""

from .error_handling import GPArgumentError, GPDimensionError

import numpy

class MeanFunction(object):
    r"""Mean function base class.
    
    Subclasses implement :py:meth:`_evaluate`, :py:meth:`_gradient` and,
    if they set `supports_hessian`, :py:meth:`_hessian`. The public methods
    validate and cast their arguments first.
    
    Parameters
    ----------
    num_dim : positive int, optional
        Number of dimensions of the input data. Default is 1.
    num_params : Non-negative int, optional
        Number of parameters in the model. Default is 0.
    param_names : list of str (`num_params`,), optional
        List of labels for the hyperparameters. Default is all empty strings.
    """
    supports_hessian = True
    
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
    
    def evaluate(self, hyperparameters, x):
        """Evaluate the mean at each of the `N` rows of `x`.
        
        Returns
        -------
        mu : :py:class:`Array`, (`N`,)
        """
        hyperparameters, x = self._check_inputs(hyperparameters, x)
        return self._evaluate(hyperparameters, x)
    
    def gradient(self, hyperparameters, x, i):
        r"""Evaluate :math:`\partial \mu / \partial \theta_i` at each row of `x`.
        """
        hyperparameters, x = self._check_inputs(hyperparameters, x)
        return self._gradient(hyperparameters, x, self._check_index(i))
    
    def hessian(self, hyperparameters, x, i, j):
        r"""Evaluate :math:`\partial^2 \mu / \partial \theta_i \partial \theta_j` at each row of `x`.
        """
        if not self.supports_hessian:
            raise NotImplementedError("This mean function does not support "
                                      "Hessians with respect to its hyperparameters!")
        hyperparameters, x = self._check_inputs(hyperparameters, x)
        return self._hessian(hyperparameters, x, self._check_index(i), self._check_index(j))
    
    def __call__(self, hyperparameters, x):
        return self.evaluate(hyperparameters, x)
    
    def _evaluate(self, hyperparameters, x):
        raise NotImplementedError("This is an abstract method -- please use "
                                  "one of the implementing subclasses!")
    
    def _gradient(self, hyperparameters, x, i):
        raise NotImplementedError("This is an abstract method -- please use "
                                  "one of the implementing subclasses!")
    
    def _hessian(self, hyperparameters, x, i, j):
        # Means that are linear in their hyperparameters have no curvature.
        return numpy.zeros(x.shape[0])
    
    def _check_inputs(self, hyperparameters, x):
        hyperparameters = numpy.array(hyperparameters, dtype=float, ndmin=1)
        if hyperparameters.shape != (self.num_params,):
            raise GPDimensionError(
                "Mean function takes %d hyperparameters, got %d!"
                % (self.num_params, hyperparameters.size)
            )
        x = numpy.asarray(x, dtype=float)
        if x.ndim == 1:
            x = x[:, None]
        if x.ndim != 2 or x.shape[1] != self.num_dim:
            raise GPDimensionError(
                "Inputs must have shape (N, %d), got %s!" % (self.num_dim, x.shape)
            )
        return hyperparameters, x
    
    def _check_index(self, i):
        if not isinstance(i, (int, numpy.integer)) or i < 0 or i >= self.num_params:
            raise GPArgumentError(
                "Hyperparameter index must be an integer in [0, %d), got %r!"
                % (self.num_params, i)
            )
        return int(i)

class ZeroMeanFunction(MeanFunction):
    """Mean function that is identically zero and has no hyperparameters.
    """
    def __init__(self, num_dim=1):
        super(ZeroMeanFunction, self).__init__(num_dim=num_dim, num_params=0)
    
    def _evaluate(self, hyperparameters, x):
        return numpy.zeros(x.shape[0])

class ConstantMeanFunction(MeanFunction):
    """Constant mean function with the single hyperparameter `c`.
    """
    def __init__(self, num_dim=1):
        super(ConstantMeanFunction, self).__init__(num_dim=num_dim,
                                                   num_params=1,
                                                   param_names=['c'])
    
    def _evaluate(self, hyperparameters, x):
        return hyperparameters[0] * numpy.ones(x.shape[0])
    
    def _gradient(self, hyperparameters, x, i):
        return numpy.ones(x.shape[0])

class LinearMeanFunction(MeanFunction):
    r"""Linear mean function of arbitrary dimension.
    
    The form is :math:`m_0 x_0 + m_1 x_1 + \dots + b`, with the hyperparameters
    always referenced in the order `m0, m1, ..., b`.
    
    Parameters
    ----------
    num_dim : positive int, optional
        The number of dimensions of the input data. Default is 1.
    """
    def __init__(self, num_dim=1):
        super(LinearMeanFunction, self).__init__(
            num_dim=num_dim,
            num_params=num_dim + 1,
            param_names=['m%d' % (i,) for i in range(0, num_dim)] + ['b']
        )
    
    def _evaluate(self, hyperparameters, x):
        return x.dot(hyperparameters[:-1]) + hyperparameters[-1]
    
    def _gradient(self, hyperparameters, x, i):
        if i == self.num_dim:
            return numpy.ones(x.shape[0])
        return x[:, i].copy()
