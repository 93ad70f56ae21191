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

"""Linear algebra and numerical differentiation helpers used throughout :py:mod:`gphessian`.
"""

import numpy
import scipy
import scipy.linalg

def solve_chol(L, B):
    r"""Solve :math:`(L^T L) X = B` given the upper Cholesky factor `L`.
    
    Parameters
    ----------
    L : :py:class:`Array`, (`N`, `N`)
        Upper triangular Cholesky factor.
    B : :py:class:`Array`, (`N`,) or (`N`, `M`)
        Right-hand side(s).
    
    Returns
    -------
    X : :py:class:`Array`, same shape as `B`
    """
    return scipy.linalg.cho_solve((L, False), B)

def is_chol(A):
    """Returns True if `A` looks like an upper triangular Cholesky factor.
    
    `A` must be a real, square, upper triangular matrix with a strictly
    positive diagonal.
    """
    A = numpy.asarray(A)
    return (
        A.ndim == 2 and
        A.shape[0] == A.shape[1] and
        numpy.isrealobj(A) and
        (numpy.diag(A) > 0).all() and
        (numpy.tril(A, -1) == 0).all()
    )

def product_trace(A, B):
    """Computes :math:`\\mathrm{tr}(AB)` for symmetric `A`, `B` in O(N^2).
    
    When only `A` is symmetric this gives :math:`\\mathrm{tr}(AB^T)`.
    """
    return numpy.dot(numpy.ravel(A), numpy.ravel(B))

def finite_difference_gradient(fun, x0, step=1e-5):
    """Centered finite-difference gradient of the scalar function `fun` at `x0`.
    
    Parameters
    ----------
    fun : callable
        Maps an (`D`,) array to a float.
    x0 : :py:class:`Array` or other Array-like, (`D`,)
        Point to differentiate at.
    step : float, optional
        Perturbation applied to each coordinate. Default is 1e-5.
    
    Returns
    -------
    grad : :py:class:`Array`, (`D`,)
    """
    x0 = numpy.asarray(x0, dtype=float)
    grad = numpy.zeros_like(x0)
    for k in range(0, len(x0)):
        dx = numpy.zeros_like(x0)
        dx[k] = step
        grad[k] = (fun(x0 + dx) - fun(x0 - dx)) / (2.0 * step)
    return grad

def finite_difference_hessian(grad_fun, x0, step=1e-5):
    """Centered finite-difference Hessian from the vector-valued gradient `grad_fun`.
    
    Column `k` is the centered difference of `grad_fun` along coordinate `k`.
    The result is not symmetrized.
    
    Parameters
    ----------
    grad_fun : callable
        Maps an (`D`,) array to an (`D`,) gradient array.
    x0 : :py:class:`Array` or other Array-like, (`D`,)
        Point to differentiate at.
    step : float, optional
        Perturbation applied to each coordinate. Default is 1e-5.
    
    Returns
    -------
    H : :py:class:`Array`, (`D`, `D`)
    """
    x0 = numpy.asarray(x0, dtype=float)
    H = numpy.zeros((len(x0), len(x0)))
    for k in range(0, len(x0)):
        dx = numpy.zeros_like(x0)
        dx[k] = step
        H[:, k] = (
            numpy.asarray(grad_fun(x0 + dx)) - numpy.asarray(grad_fun(x0 - dx))
        ) / (2.0 * step)
    return H
