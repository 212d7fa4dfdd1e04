from rest_framework.pagination import PageNumberPagination
from core.constants import pagination_page_size, max_pagination_page_size

class DefaultPagination(PageNumberPagination):
    page_size = pagination_page_size
    page_size_query_param = "limit"
    max_page_size = max_pagination_page_size

    def get_root_pagination_data(self):
        paginator = self.page.paginator
        return {
            "total_count": paginator.count,
            "total_pages": paginator.num_pages,
            "next": self.get_next_link(),
            "previous": self.get_previous_link(),
            "page": self.page.number,
            "page_size": paginator.per_page,
        }
