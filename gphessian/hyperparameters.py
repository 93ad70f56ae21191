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

"""Provides the :py:class:`Hyperparameters` record holding the covariance, noise and mean blocks.
"""

from .error_handling import GPDimensionError

import numpy

class Hyperparameters(object):
    """Hyperparameters of a GP regression model, partitioned into three blocks.
    
    The blocks are always referenced in the order listed:
    
    ==== ===========================================================
    cov  covariance hyperparameters, in the order the kernel expects
    lik  log of the noise standard deviation, :math:`\\sigma^2 = e^{2 lik}`
    mean mean function hyperparameters, in the order the mean expects
    ==== ===========================================================
    
    Parameters
    ----------
    cov : :py:class:`Array` or other Array-like, (`num_cov`,)
        Covariance hyperparameters.
    lik : float
        Log noise standard deviation.
    mean : :py:class:`Array` or other Array-like, (`num_mean`,), optional
        Mean hyperparameters. Default is no mean hyperparameters.
    """
    def __init__(self, cov, lik, mean=()):
        self.cov = numpy.array(cov, dtype=float, ndmin=1)
        self.lik = float(lik)
        self.mean = numpy.array(mean, dtype=float, ndmin=1)
        if self.cov.ndim != 1 or self.mean.ndim != 1:
            raise GPDimensionError("cov and mean must be one-dimensional!")
    
    @property
    def num_cov(self):
        return len(self.cov)
    
    @property
    def num_mean(self):
        return len(self.mean)
    
    @property
    def num_params(self):
        """Total number of hyperparameters, `num_cov` + 1 + `num_mean`.
        """
        return self.num_cov + 1 + self.num_mean
    
    @property
    def noise_variance(self):
        return numpy.exp(2.0 * self.lik)
    
    def to_vector(self):
        """Flatten to a single array ordered as (cov, lik, mean).
        """
        return numpy.concatenate((self.cov, [self.lik], self.mean))
    
    @classmethod
    def from_vector(cls, vec, num_cov, num_mean=0):
        """Build a record from a flat (cov, lik, mean) array.
        
        Raises
        ------
        GPDimensionError
            If the length of `vec` is not `num_cov` + 1 + `num_mean`.
        """
        vec = numpy.asarray(vec, dtype=float)
        if vec.ndim != 1 or len(vec) != num_cov + 1 + num_mean:
            raise GPDimensionError(
                "Length of vec must be %d!" % (num_cov + 1 + num_mean,)
            )
        return cls(vec[:num_cov], vec[num_cov], vec[num_cov + 1:])
    
    def copy(self):
        return Hyperparameters(self.cov.copy(), self.lik, self.mean.copy())
    
    def __repr__(self):
        return "Hyperparameters(cov=%r, lik=%r, mean=%r)" % (
            self.cov.tolist(), self.lik, self.mean.tolist()
        )
