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

"""Exception classes raised by :py:mod:`gphessian`.
"""

class GPArgumentError(ValueError):
    """Raised when the arguments to a :py:mod:`gphessian` routine are invalid.
    """
    pass

class GPDimensionError(GPArgumentError):
    """Raised when array shapes or hyperparameter counts are inconsistent.
    
    This is always detected before any factorization is attempted.
    """
    pass
