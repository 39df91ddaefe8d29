#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class SearchError(Exception):
    pass


class CategoryError(Exception):
    pass
