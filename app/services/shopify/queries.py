"""GraphQL query/mutation strings used by the visibility manager."""

QUERY_PRODUCTS_PAGE = """
query getProducts($first: Int, $last: Int, $query: String, $after: String, $before: String, $namespace: String!, $key: String!) {
  products(
    first: $first,
    last: $last,
    query: $query,
    after: $after,
    before: $before,
    sortKey: UPDATED_AT,
    reverse: true
  ) {
    edges {
      cursor
      node {
        id
        title
        handle
        status
        featuredImage {
          url(transform: {maxWidth: 50, maxHeight: 50})
          altText
        }
        metafield(namespace: $namespace, key: $key) {
          value
        }
      }
    }
    pageInfo {
      hasNextPage
      hasPreviousPage
      startCursor
      endCursor
    }
  }
}
"""

QUERY_HIDDEN_PRODUCTS = """
query getHiddenProducts($first: Int!, $query: String!) {
  products(first: $first, query: $query) {
    edges {
      node {
        id
        handle
      }
    }
  }
}
"""

MUTATION_METAFIELDS_SET = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      id
      key
      value
    }
    userErrors {
      field
      message
    }
  }
}
"""
