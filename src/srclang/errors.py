class SrcLangError(Exception): pass
class FlagError(SrcLangError): pass
class CompileError(SrcLangError): pass
class ProjectError(SrcLangError): pass
