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

""":py:mod:`gphessian` - Exact Gaussian process inference with Hessians of the marginal likelihood
"""

from .error_handling import GPArgumentError, GPDimensionError
from .hyperparameters import Hyperparameters
from .kernel import Kernel, ARDSquaredExponentialKernel
from .mean import (MeanFunction, ZeroMeanFunction, ConstantMeanFunction,
                   LinearMeanFunction)
from .inference import (exact_inference, gaussian_inference, Posterior,
                        Gradient, Hessian, NOISE_THRESHOLD)
from .utils import (solve_chol, is_chol, product_trace,
                    finite_difference_gradient, finite_difference_hessian)
