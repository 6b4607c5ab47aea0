"""
Knowledge & rule registry.

Modules
-------
rules    : ExpertRule ABC, TemplateRule, CallableRule.
builtin  : knowledge tables, decision templates and domain rules seeded at start.
loader   : load_knowledge_file() — versioned records from config/knowledge.toml.
registry : KnowledgeRegistry — copy-on-write snapshots, locked writers.
"""
