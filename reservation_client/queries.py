"""GraphQL documents used by the reservation client."""

RESERVATION_FIELDS = """
      id
      userId
      productId
      outletId
      quantity
      status
      createdAt
      updatedAt
      expiresAt
      pickedUpAt
      cancelledAt
"""

PRODUCT_FIELDS = """
      id
      businessId
      categoryId
      name
      description
      price
      discountedPrice
      stock
      imageUrl
      status
      expiresAt
      createdAt
      updatedAt
"""

BUSINESS_FIELDS = """
      id
      name
      description
      address
      foodType
      latitude
      longitude
      isActive
"""

CREATE_RESERVATION = f"""
  mutation CreateReservation($businessId: Int!, $productId: Int!, $token: String!, $quantity: Int!) {{
    createReservation(businessId: $businessId, productId: $productId, token: $token, quantity: $quantity) {{
{RESERVATION_FIELDS}
    }}
  }}
"""

GET_MY_RESERVATIONS = f"""
  query GetMyReservations($token: String!, $status: String) {{
    getMyReservations(token: $token, status: $status) {{
{RESERVATION_FIELDS}
    }}
  }}
"""

CANCEL_RESERVATION = f"""
  mutation CancelReservation($reservationId: Int!, $token: String!) {{
    cancelReservation(reservationId: $reservationId, token: $token) {{
{RESERVATION_FIELDS}
    }}
  }}
"""

UPDATE_RESERVATION_STATUS = f"""
  mutation UpdateReservationStatus($reservationId: Int!, $token: String!, $status: String!) {{
    updateReservationStatus(reservationId: $reservationId, token: $token, status: $status) {{
{RESERVATION_FIELDS}
    }}
  }}
"""

MARK_AS_PICKED_UP = f"""
  mutation MarkAsPickedUp($reservationId: Int!, $token: String!) {{
    markReservationPickedUp(reservationId: $reservationId, token: $token) {{
{RESERVATION_FIELDS}
    }}
  }}
"""

GET_BUSINESS_RESERVATIONS = f"""
  query GetBusinessReservations($businessId: Int!, $token: String!, $status: String) {{
    getBusinessReservations(businessId: $businessId, token: $token, status: $status) {{
{RESERVATION_FIELDS}
    }}
  }}
"""

GET_PRODUCTS_BY_BUSINESS = f"""
  query GetProductsByBusiness($businessId: Int!) {{
    getProductsByBusiness(businessId: $businessId) {{
{PRODUCT_FIELDS}
    }}
  }}
"""

GET_ALL_PRODUCTS = f"""
  query GetAllProducts($limit: Int, $offset: Int) {{
    getAllProducts(limit: $limit, offset: $offset) {{
{PRODUCT_FIELDS}
    }}
  }}
"""

GET_ALL_BUSINESSES = f"""
  query GetAllBusinesses {{
    getAllBusinesses {{
{BUSINESS_FIELDS}
    }}
  }}
"""

GET_BUSINESSES_BY_USER = f"""
  query GetBusinessesByUser($userId: Int!) {{
    getBusinessesByUser(userId: $userId) {{
{BUSINESS_FIELDS}
    }}
  }}
"""
