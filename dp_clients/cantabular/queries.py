"""GraphQL query templates for the Cantabular extended API and their variables."""

from __future__ import annotations

import json

from pydantic import BaseModel, Field

from dp_clients.utils.exceptions import EncodingFailed

# Static dataset counts (variables with categories and counts)
QUERY_STATIC_DATASET = """
query($dataset: String!, $variables: [String!]!, $filters: [Filter!]) {
	dataset(name: $dataset) {
		table(variables: $variables, filters: $filters) {
			dimensions {
				count
				variable { name label }
				categories { code label }
			}
			values
			error
		}
	}
}"""

# Static dataset dimension options (variables with categories, no counts)
QUERY_DIMENSION_OPTIONS = """
query($dataset: String!, $variables: [String!]!, $filters: [Filter!]) {
	dataset(name: $dataset) {
		table(variables: $variables, filters: $filters) {
			dimensions {
				variable { name label }
				categories { code label }
			}
			values
			error
		}
	}
}"""

# Dimensions (variables without categories)
QUERY_DIMENSIONS = """
query($dataset: String!) {
	dataset(name: $dataset) {
		variables {
			edges {
				node {
					name
					mapFrom {
						edges {
							node {
								filterOnly
								label
								name
							}
						}
					}
					label
					categories {
						totalCount
					}
				}
			}
		}
	}
}"""

# Subset of dimensions selected by name, without categories
QUERY_DIMENSIONS_BY_NAME = """
query($dataset: String!, $variables: [String!]!) {
	dataset(name: $dataset) {
		variables(names: $variables) {
			edges {
				node {
					name
					mapFrom {
						edges {
							node {
								filterOnly
								label
								name
							}
						}
					}
					label
					categories {
						totalCount
					}
				}
			}
		}
	}
}"""

# Geography dimensions, rooted at the dataset rule base
QUERY_GEOGRAPHY_DIMENSIONS = """
query($dataset: String!) {
	dataset(name: $dataset) {
		ruleBase {
			name
			isSourceOf {
				edges {
					node {
						name
						mapFrom {
							edges {
								node {
									filterOnly
									label
									name
								}
							}
						}
						label
						categories{
							totalCount
						}
					}
				}
			}
		}
	}
}"""

QUERY_DIMENSIONS_SEARCH = """
query($dataset: String!, $text: String!) {
	dataset(name: $dataset) {
		variables {
			search(text: $text) {
				edges {
					node {
						name
						label
						mapFrom {
							totalCount
							edges {
								node {
									name
									label
								}
							}
						}
					}
				}
			}
		}
	}
}"""

# Areas (geography categories) matching free text
QUERY_AREAS_BY_AREA = """
query($dataset: String!, $text: String!) {
	dataset(name: $dataset) {
		ruleBase 
		{
		  isSourceOf {
			categorySearch(text: $text){
		   		edges {
			  		node { 
						code
						label
						variable {
				  			mapFrom{
								edges{
					  				node{
										name
										label
										 }
									}
				 				 }
							 name 
						}
					  } 
	  				}
				}
	  		}
	  	}
	  }
  }
"""

QUERY_LIST_DATASETS = """
query {
	datasets {
		edges {
			node {
				name
			}
		}
	}
}"""


class Filter(BaseModel):
    """Cantabular ``Filter`` input: the category codes kept for one variable."""

    variable: str
    codes: list[str] = Field(default_factory=list)

    def to_wire(self) -> dict[str, object]:
        return {"codes": list(self.codes), "variable": self.variable}


class QueryData(BaseModel):
    """Every variable any catalog query may reference.

    Variables a query does not declare are ignored by the server.
    """

    dataset: str = ""
    text: str = ""
    variables: list[str] = Field(default_factory=list)
    filters: list[Filter] = Field(default_factory=list)

    def to_variables(self) -> dict[str, object]:
        variables: dict[str, object] = {
            "dataset": self.dataset,
            "variables": list(self.variables),
            "text": self.text,
        }
        # An empty filter list and an absent one mean different things to the server.
        if self.filters:
            variables["filters"] = [f.to_wire() for f in self.filters]
        return variables

    def encode(self, query: str) -> bytes:
        """Serialize ``query`` with these variables into a GraphQL POST body."""
        try:
            return json.dumps({"query": query, "variables": self.to_variables()}).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodingFailed(
                f"failed to encode GraphQL query: {exc}",
                log_data={"query_data": self.model_dump()},
            ) from exc
